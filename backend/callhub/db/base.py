"""SQLAlchemy Declarative Base - shared base class for the ORM model.

Invariants:
    - Base is the single source of truth for table metadata (create_all at backend start)
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for CallHub ORM models."""
    pass
