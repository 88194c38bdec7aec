"""Service test fixtures - handler directory, store, registry, dispatcher, HTTP client.

Invariants:
    - Every test gets its own scripts directory under tmp_path
    - Stores default to the volatile backend (no files, no engine)
    - The HTTP client overrides api.dependencies, so lifespan never runs in tests

Design Decisions:
    - write_module returns the path so tests can edit/delete it for hot-reload checks
"""

import textwrap

import pytest
from httpx import ASGITransport, AsyncClient

from callhub.api.dependencies import (
    get_call_store, get_dispatcher, get_listener_hub, get_module_registry,
)
from callhub.infrastructure.call_store import CallStore
from callhub.infrastructure.database import VolatileBackend
from callhub.main import app
from callhub.services.builtin_db_module import MODULE_NAME, build_db_module
from callhub.services.change_notifier import ListenerHub
from callhub.services.dispatcher import Dispatcher
from callhub.services.module_registry import ModuleRegistry

CAT_MODULE = '''
import asyncio

def walk(name, steps=3):
    return {"cat": name, "steps": steps}

async def nap(name):
    await asyncio.sleep(0)
    return name + " napped"

def explode(reason):
    raise ValueError(reason)

def echo(*args):
    return list(args)

NOT_CALLABLE = 42

FUNCTIONS = {
    "walk": walk,
    "nap": nap,
    "explode": explode,
    "echo": echo,
    "constant": NOT_CALLABLE,
}
'''


@pytest.fixture
def scripts_dir(tmp_path):
    path = tmp_path / "scripts"
    path.mkdir()
    return path


@pytest.fixture
def write_module(scripts_dir):
    """Write <name>.py into the scripts directory."""
    def _write(name: str, source: str):
        path = scripts_dir / f"{name}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def cat_module(write_module):
    return write_module("cat", CAT_MODULE)


@pytest.fixture
def store():
    return CallStore(VolatileBackend())


@pytest.fixture
def registry(scripts_dir, store):
    return ModuleRegistry(scripts_dir, {MODULE_NAME: build_db_module(store)})


@pytest.fixture
def dispatcher(registry, store):
    return Dispatcher(registry, store)


@pytest.fixture
def hub():
    return ListenerHub()


@pytest.fixture
async def client(store, registry, dispatcher, hub):
    """FastAPI test client with service dependencies overridden."""
    app.dependency_overrides[get_call_store] = lambda: store
    app.dependency_overrides[get_module_registry] = lambda: registry
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_listener_hub] = lambda: hub

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
