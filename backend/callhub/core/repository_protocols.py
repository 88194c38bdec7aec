"""Boundary Protocols - contracts between core/services and infrastructure.

Invariants:
    - Services never import a concrete backend; they receive one through CallStore
    - Backends store and return result TEXT; (de)serialization happens in CallStore
    - Listener is whatever can receive a JSON message (a WebSocket in production)

Design Decisions:
    - Protocol over ABC: structural subtyping, backends and fakes need no shared base
"""

from typing import Any, Protocol

# (id, call_string, result_text)
StoredRow = tuple[int, str, str | None]


class CallBackend(Protocol):
    """Contract for a calls-table backend."""
    name: str

    async def insert(self, call_string: str, result_text: str | None) -> int: ...
    async def fetch_recent(self, limit: int) -> list[StoredRow]: ...
    async def fetch_by_id(self, record_id: int) -> StoredRow | None: ...
    async def fetch_matching(self, keyword: str) -> list[StoredRow]: ...
    async def count(self) -> int: ...
    async def run_select(self, sql: str) -> list[dict[str, Any]]: ...
    async def close(self) -> None: ...


class Listener(Protocol):
    """Contract for a live-update subscriber."""
    async def send_json(self, data: Any) -> None: ...
