"""Call Store - append-only log of (call string, serialized result) over one backend.

Invariants:
    - Writes are serialized by a single asyncio.Lock (one writer at a time)
    - Ids come from the backend: unique, strictly increasing, never reused
    - recent() is newest first; search() is oldest first
    - query() only runs a single statement starting with SELECT; anything else
      raises QueryForbiddenError before reaching the backend
    - Read APIs return CallRecord with the result deserialized (raw text fallback)

Design Decisions:
    - Serialization lives here, not in backends: every backend stores plain text
    - open_call_store() wraps the fallback chain so main.py never sees backends directly
"""

import asyncio
import logging
import re
from typing import Any

from callhub.config import Settings
from callhub.core.domain_types import CallRecord, RecordId
from callhub.core.errors import QueryForbiddenError, ResourceNotFoundError
from callhub.core.repository_protocols import CallBackend, StoredRow
from callhub.core.serialize_result import deserialize_result, serialize_result
from callhub.infrastructure.database import default_backend_factories, select_backend

logger = logging.getLogger(__name__)

_READ_ONLY = re.compile(r"\s*select\b", re.IGNORECASE)


def is_read_only_query(sql: str) -> bool:
    """True for a single statement that textually starts with SELECT."""
    if not isinstance(sql, str) or not _READ_ONLY.match(sql):
        return False
    body = sql.strip().rstrip(";")
    return ";" not in body


def _to_record(row: StoredRow) -> CallRecord:
    record_id, call_string, result_text = row
    return CallRecord(
        id=RecordId(record_id),
        call_string=call_string,
        result=deserialize_result(result_text),
    )


class CallStore:
    """Persistence facade used by the dispatcher, the db module and the API."""

    def __init__(self, backend: CallBackend):
        self._backend = backend
        self._write_lock = asyncio.Lock()

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def save(self, call_string: str, result: Any) -> RecordId:
        """Serialize and append one call. Returns the new record id."""
        text = serialize_result(result)
        async with self._write_lock:
            record_id = await self._backend.insert(call_string, text)
        logger.debug(
            "Saved call record",
            extra={"record_id": record_id, "call_string": call_string},
        )
        return RecordId(record_id)

    async def recent(self, limit: int = 10) -> list[CallRecord]:
        """Newest first. A non-positive limit yields no records on every backend."""
        if limit <= 0:
            return []
        return [_to_record(r) for r in await self._backend.fetch_recent(limit)]

    async def by_id(self, record_id: int) -> CallRecord:
        row = await self._backend.fetch_by_id(record_id)
        if row is None:
            raise ResourceNotFoundError("Call record", str(record_id))
        return _to_record(row)

    async def search(self, keyword: str) -> list[CallRecord]:
        return [_to_record(r) for r in await self._backend.fetch_matching(keyword)]

    async def count(self) -> int:
        return await self._backend.count()

    async def query(self, sql: str) -> list[dict[str, Any]]:
        if not is_read_only_query(sql):
            logger.warning(f"Rejected non read-only query: {sql!r}")
            raise QueryForbiddenError()
        return await self._backend.run_select(sql)

    async def close(self) -> None:
        await self._backend.close()


async def open_call_store(settings: Settings) -> CallStore:
    """Select the first working backend and wrap it."""
    backend = await select_backend(default_backend_factories(settings))
    return CallStore(backend)
