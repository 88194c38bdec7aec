"""Persistence Backends - calls-table engines and the startup fallback chain.

Invariants:
    - Backend choice happens once (select_backend at startup) and is fixed for the process
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to PersistenceError (core/errors.py)
    - The calls table is created at backend construction (create_all, idempotent)
    - VolatileBackend keeps rows in process memory only; restart loses them

Design Decisions:
    - Ordered list of async factories: the first one that constructs wins, each
      failure is logged at warning level and the next one is tried
    - Preferred: SQLAlchemy asyncio engine (aiosqlite); secondary: SQLAlchemy sync
      engine on the stdlib sqlite3 driver, driven through asyncio.to_thread
    - In-memory SQLite URLs use StaticPool so every thread sees the same database
    - expire_on_commit=False: inserted ids stay readable after commit
"""

import asyncio
import logging
import string
from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncGenerator, Any

from sqlalchemy import Engine, create_engine, func, or_, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from callhub.config import Settings
from callhub.core.errors import PersistenceError
from callhub.core.repository_protocols import CallBackend, StoredRow
from callhub.db.base import Base
from callhub.models.call import Call

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], Awaitable[CallBackend]]


# ─── Shared statements ──────────────────────────────────────────

_COLUMNS = (Call.id, Call.call_string, Call.result)


def _recent_stmt(limit: int):
    return select(*_COLUMNS).order_by(Call.id.desc()).limit(limit)


def _by_id_stmt(record_id: int):
    return select(*_COLUMNS).where(Call.id == record_id)


def _matching_stmt(keyword: str):
    return select(*_COLUMNS).where(or_(
        Call.call_string.icontains(keyword, autoescape=True),
        Call.result.icontains(keyword, autoescape=True),
    )).order_by(Call.id)


def _count_stmt():
    return select(func.count()).select_from(Call)


def _engine_options(database_url: str) -> dict[str, Any]:
    """Share one connection for in-memory SQLite; defaults otherwise."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {}


def _to_persistence_error(exc: SQLAlchemyError, operation: str) -> PersistenceError:
    """Map a SQLAlchemy exception to PersistenceError, keeping the driver message."""
    detail = str(getattr(exc, "orig", None) or exc)
    if isinstance(exc, IntegrityError):
        logger.error(f"DB integrity error: {exc}")
        return PersistenceError(f"Integrity constraint violated ({detail})", operation)
    if isinstance(exc, OperationalError):
        logger.error(f"DB operational error: {exc}")
        return PersistenceError(f"Connection or operational error ({detail})", operation)
    if isinstance(exc, DBAPIError):
        logger.error(f"DB driver error: {exc}")
        return PersistenceError(f"Database driver error ({detail})", operation)
    logger.error(f"SQLAlchemy error: {exc}")
    return PersistenceError(f"Database operation failed ({detail})", operation)


def _rows(result) -> list[StoredRow]:
    return [(row.id, row.call_string, row.result) for row in result]


# ─── Preferred: asyncio engine ──────────────────────────────────

class AsyncEngineBackend:
    """Calls table on a SQLAlchemy asyncio engine."""

    name = "sqlalchemy-async"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @classmethod
    async def open(cls, database_url: str) -> "AsyncEngineBackend":
        engine = create_async_engine(database_url, **_engine_options(database_url))
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception:
            await engine.dispose()
            raise
        return cls(engine)

    @asynccontextmanager
    async def session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _to_persistence_error(e, operation) from e
        finally:
            await session.close()

    async def insert(self, call_string: str, result_text: str | None) -> int:
        async with self.session("insert") as session:
            row = Call(call_string=call_string, result=result_text)
            session.add(row)
            await session.commit()
            return row.id

    async def fetch_recent(self, limit: int) -> list[StoredRow]:
        async with self.session("select") as session:
            return _rows(await session.execute(_recent_stmt(limit)))

    async def fetch_by_id(self, record_id: int) -> StoredRow | None:
        async with self.session("select") as session:
            rows = _rows(await session.execute(_by_id_stmt(record_id)))
            return rows[0] if rows else None

    async def fetch_matching(self, keyword: str) -> list[StoredRow]:
        async with self.session("search") as session:
            return _rows(await session.execute(_matching_stmt(keyword)))

    async def count(self) -> int:
        async with self.session("count") as session:
            return (await session.execute(_count_stmt())).scalar_one()

    async def run_select(self, sql: str) -> list[dict[str, Any]]:
        async with self.session("query") as session:
            conn = await session.connection()
            result = await conn.exec_driver_sql(sql)
            return [dict(row._mapping) for row in result]

    async def close(self) -> None:
        await self.engine.dispose()


# ─── Secondary: sync engine in worker threads ───────────────────

class SyncEngineBackend:
    """Calls table on a synchronous SQLAlchemy engine, run off the event loop."""

    name = "sqlalchemy-sync"

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    async def open(cls, database_url: str) -> "SyncEngineBackend":
        return await asyncio.to_thread(cls._open_blocking, database_url)

    @classmethod
    def _open_blocking(cls, database_url: str) -> "SyncEngineBackend":
        engine = create_engine(database_url, **_engine_options(database_url))
        try:
            Base.metadata.create_all(engine)
        except Exception:
            engine.dispose()
            raise
        return cls(engine)

    @contextmanager
    def session(self, operation: str) -> Iterator[Session]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            raise _to_persistence_error(e, operation) from e
        finally:
            session.close()

    def _insert(self, call_string: str, result_text: str | None) -> int:
        with self.session("insert") as session:
            row = Call(call_string=call_string, result=result_text)
            session.add(row)
            session.commit()
            return row.id

    def _fetch(self, stmt, operation: str) -> list[StoredRow]:
        with self.session(operation) as session:
            return _rows(session.execute(stmt))

    def _count(self) -> int:
        with self.session("count") as session:
            return session.execute(_count_stmt()).scalar_one()

    def _run_select(self, sql: str) -> list[dict[str, Any]]:
        with self.session("query") as session:
            result = session.connection().exec_driver_sql(sql)
            return [dict(row._mapping) for row in result]

    async def insert(self, call_string: str, result_text: str | None) -> int:
        return await asyncio.to_thread(self._insert, call_string, result_text)

    async def fetch_recent(self, limit: int) -> list[StoredRow]:
        return await asyncio.to_thread(self._fetch, _recent_stmt(limit), "select")

    async def fetch_by_id(self, record_id: int) -> StoredRow | None:
        rows = await asyncio.to_thread(self._fetch, _by_id_stmt(record_id), "select")
        return rows[0] if rows else None

    async def fetch_matching(self, keyword: str) -> list[StoredRow]:
        return await asyncio.to_thread(self._fetch, _matching_stmt(keyword), "search")

    async def count(self) -> int:
        return await asyncio.to_thread(self._count)

    async def run_select(self, sql: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._run_select, sql)

    async def close(self) -> None:
        await asyncio.to_thread(self.engine.dispose)


# ─── Last resort: process memory ────────────────────────────────
# SQLite lower() and LIKE only fold ASCII; match that here
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


class VolatileBackend:
    """In-process list of rows. Lost on restart; no SQL."""

    name = "volatile"

    def __init__(self):
        self._rows: list[StoredRow] = []

    @classmethod
    async def open(cls) -> "VolatileBackend":
        return cls()

    async def insert(self, call_string: str, result_text: str | None) -> int:
        record_id = len(self._rows) + 1
        self._rows.append((record_id, call_string, result_text))
        return record_id

    async def fetch_recent(self, limit: int) -> list[StoredRow]:
        if limit <= 0:
            return []
        return list(reversed(self._rows[-limit:]))

    async def fetch_by_id(self, record_id: int) -> StoredRow | None:
        if 1 <= record_id <= len(self._rows):
            return self._rows[record_id - 1]
        return None

    async def fetch_matching(self, keyword: str) -> list[StoredRow]:
        needle = _ascii_lower(keyword)
        return [
            row for row in self._rows
            if needle in _ascii_lower(row[1]) or needle in _ascii_lower(row[2] or "")
        ]

    async def count(self) -> int:
        return len(self._rows)

    async def run_select(self, sql: str) -> list[dict[str, Any]]:
        raise PersistenceError(
            "custom SQL queries are not supported by the volatile backend", "query",
        )

    async def close(self) -> None:
        return None


# ─── Selection ──────────────────────────────────────────────────

def default_backend_factories(settings: Settings) -> list[tuple[str, BackendFactory]]:
    """Preferred engine, secondary engine, then process memory."""
    return [
        (AsyncEngineBackend.name, lambda: AsyncEngineBackend.open(settings.database_url)),
        (SyncEngineBackend.name, lambda: SyncEngineBackend.open(settings.fallback_database_url)),
        (VolatileBackend.name, VolatileBackend.open),
    ]


async def select_backend(
    factories: Sequence[tuple[str, BackendFactory]],
) -> CallBackend:
    """Return the first backend whose factory succeeds."""
    for label, factory in factories:
        try:
            backend = await factory()
        except Exception as e:
            logger.warning(
                f"Persistence backend '{label}' unavailable: {e}",
                extra={"backend": label},
            )
            continue
        logger.info(
            f"Persistence backend selected: {backend.name}",
            extra={"backend": backend.name},
        )
        return backend
    raise PersistenceError("no persistence backend could be constructed", "startup")
