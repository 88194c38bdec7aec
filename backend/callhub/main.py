"""CallHub API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CallHubError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Persistence backend selected once, in lifespan, before any request is served
    - Watcher stopped and backend closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Services live on app.state and reach routes through api/dependencies.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from callhub.api.error_handlers import register_error_handlers
from callhub.api.routes import db_inspect, dispatch, health, live_updates
from callhub.config import get_settings
from callhub.infrastructure.call_store import open_call_store
from callhub.infrastructure.module_watcher import ModuleWatcher
from callhub.infrastructure.observability import setup_logging
from callhub.services.builtin_db_module import MODULE_NAME, build_db_module
from callhub.services.change_notifier import ListenerHub
from callhub.services.dispatcher import Dispatcher
from callhub.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    store = await open_call_store(settings)
    registry = ModuleRegistry(
        settings.scripts_dir, {MODULE_NAME: build_db_module(store)},
    )
    hub = ListenerHub()
    watcher = ModuleWatcher(
        settings.scripts_dir, registry, hub,
        debounce=settings.watch_debounce_ms / 1000,
    )

    app.state.call_store = store
    app.state.module_registry = registry
    app.state.dispatcher = Dispatcher(registry, store)
    app.state.listener_hub = hub
    if settings.watch_enabled:
        watcher.start()
    logger.info(
        "CallHub API started",
        extra={"backend": store.backend_name},
    )
    yield
    logger.info("CallHub API shutting down")
    await watcher.stop()
    await store.close()


app = FastAPI(title="CallHub API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(dispatch.router)
app.include_router(db_inspect.router)
app.include_router(live_updates.router)

register_error_handlers(app)
