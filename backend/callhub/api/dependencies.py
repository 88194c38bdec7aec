"""Route Dependencies - hand the lifespan-built services to route handlers.

Invariants:
    - Services are built once in main.lifespan and stored on app.state
    - Every accessor raises RuntimeError if the app was not started (mirrors get_db)
    - Tests override these functions via app.dependency_overrides

Design Decisions:
    - HTTPConnection parameter: the same dependency serves HTTP and WebSocket routes
"""

from starlette.requests import HTTPConnection

from callhub.infrastructure.call_store import CallStore
from callhub.services.change_notifier import ListenerHub
from callhub.services.dispatcher import Dispatcher
from callhub.services.module_registry import ModuleRegistry


def _state_attr(conn: HTTPConnection, name: str):
    value = getattr(conn.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized")
    return value


def get_call_store(conn: HTTPConnection) -> CallStore:
    return _state_attr(conn, "call_store")


def get_module_registry(conn: HTTPConnection) -> ModuleRegistry:
    return _state_attr(conn, "module_registry")


def get_dispatcher(conn: HTTPConnection) -> Dispatcher:
    return _state_attr(conn, "dispatcher")


def get_listener_hub(conn: HTTPConnection) -> ListenerHub:
    return _state_attr(conn, "listener_hub")
