"""Live Updates - WebSocket channel carrying modules_updated events.

Invariants:
    - A new connection receives the current module list immediately
    - The socket is registered with the hub before the snapshot is sent, and
      removed on disconnect (explicit), or on the next failed send (lazy)
    - Incoming client messages are read and ignored (keeps disconnects observable)
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from callhub.api.dependencies import get_listener_hub, get_module_registry
from callhub.services.change_notifier import ListenerHub, modules_updated_event
from callhub.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["live"])


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    hub: ListenerHub = Depends(get_listener_hub),
    registry: ModuleRegistry = Depends(get_module_registry),
):
    await websocket.accept()
    hub.add(websocket)
    try:
        modules = await asyncio.to_thread(registry.list_all)
        await websocket.send_json(modules_updated_event(modules))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Live update client disconnected")
    finally:
        hub.remove(websocket)
