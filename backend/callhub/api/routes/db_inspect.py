"""Database Inspection Routes - read-only views over the calls table.

Invariants:
    - Every success body is {"results": ...}
    - POST /api/db/query only runs a single SELECT; anything else is 403 and
      never reaches the database
    - Store failures surface as CallHubError through the global handlers
"""

import logging

from fastapi import APIRouter, Depends, Query

from callhub.api.dependencies import get_call_store
from callhub.infrastructure.call_store import CallStore
from callhub.schemas.call import QueryRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/db", tags=["db"])


@router.get("/recent")
async def recent_calls(
    limit: int = Query(10, ge=1, le=1000),
    store: CallStore = Depends(get_call_store),
):
    return {"results": [r.to_dict() for r in await store.recent(limit)]}


@router.get("/count")
async def count_calls(store: CallStore = Depends(get_call_store)):
    return {"results": await store.count()}


@router.get("/search")
async def search_calls(
    term: str = Query(..., min_length=1, max_length=1000),
    store: CallStore = Depends(get_call_store),
):
    """Substring match on call string or stored result."""
    return {"results": [r.to_dict() for r in await store.search(term)]}


@router.get("/calls/{record_id}")
async def get_call(record_id: int, store: CallStore = Depends(get_call_store)):
    return {"results": (await store.by_id(record_id)).to_dict()}


@router.post("/query")
async def run_query(
    body: QueryRequest, store: CallStore = Depends(get_call_store),
):
    """Run a custom read-only SELECT."""
    return {"results": await store.query(body.sql)}
