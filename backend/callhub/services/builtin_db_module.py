"""Built-in `db` Module - exposes the call store through the dispatch mechanism.

Invariants:
    - Registered as a built-in, so `db.*` calls never reach scripts/db.py
    - Functions return plain dicts/ints (JSON-ready), same shape as /api/db/*

Design Decisions:
    - Built from a ModuleHandle like any file module, so the registry treats it uniformly
"""

from callhub.core.domain_types import ModuleHandle
from callhub.infrastructure.call_store import CallStore

MODULE_NAME = "db"


def build_db_module(store: CallStore) -> ModuleHandle:
    """Handle whose functions read the given store."""

    async def get_recent(limit=10):
        return [r.to_dict() for r in await store.recent(int(limit))]

    async def get_by_id(record_id):
        return (await store.by_id(int(record_id))).to_dict()

    async def search(keyword):
        return [r.to_dict() for r in await store.search(str(keyword))]

    async def count():
        return await store.count()

    return ModuleHandle(
        name=MODULE_NAME,
        functions={
            "get_recent": get_recent,
            "get_by_id": get_by_id,
            "search": search,
            "count": count,
        },
        origin="builtin",
    )
