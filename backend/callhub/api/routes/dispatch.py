"""Dispatch Routes - execute call strings, recent history, module listing.

Invariants:
    - POST /execute always answers 200 with {"success": value} or {"error": message}
      (a malformed body is the only 400)
    - Success values are rendered with the same placeholders used for storage
    - GET /history returns the newest `history_limit` records, newest first
    - GET /modules reflects the scripts directory at request time
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from callhub.api.dependencies import (
    get_call_store, get_dispatcher, get_module_registry,
)
from callhub.config import Settings, get_settings
from callhub.core.serialize_result import to_jsonable
from callhub.infrastructure.call_store import CallStore
from callhub.schemas.call import ExecuteRequest
from callhub.services.dispatcher import Dispatcher
from callhub.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dispatch"])


@router.post("/execute")
async def execute_call(
    body: ExecuteRequest, dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Run one call string through the dispatcher."""
    envelope = await dispatcher.execute(body.call_string)
    return JSONResponse(content=to_jsonable(envelope))


@router.get("/history")
async def call_history(
    store: CallStore = Depends(get_call_store),
    settings: Settings = Depends(get_settings),
):
    """Most recent call records, newest first."""
    records = await store.recent(settings.history_limit)
    return [r.to_dict() for r in records]


@router.get("/modules")
def list_modules(registry: ModuleRegistry = Depends(get_module_registry)):
    """Loadable handler modules and their functions.

    Sync route: FastAPI runs it in the threadpool, since listing executes module code.
    """
    return {"modules": [m.to_dict() for m in registry.list_all()]}
