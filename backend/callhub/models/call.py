"""Call ORM - the single append-only `calls` table.

Invariants:
    - id auto-increments from 1 and is never reused (SQLite AUTOINCREMENT)
    - result holds serialized JSON text, or NULL; never updated after insert
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from callhub.db.base import Base


class Call(Base):
    """One dispatched call and its serialized result."""
    __tablename__ = "calls"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    call_string: Mapped[str] = mapped_column(Text, nullable=False)
    result: Mapped[str | None] = mapped_column(Text, nullable=True)
