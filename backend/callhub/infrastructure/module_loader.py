"""Module Loader - compiles one handler file from source into a fresh ModuleHandle.

Invariants:
    - Every call re-reads and re-compiles the file; nothing is cached
    - The loaded module is never registered in sys.modules
    - A handler module must define FUNCTIONS: a mapping of name -> callable
    - Any failure while reading, compiling or executing becomes ModuleLoadError

Design Decisions:
    - SourceFileLoader subclass whose get_code() always compiles the source: skips
      __pycache__, whose mtime-based validation can serve stale code for same-second edits
    - Loaded through spec.loader.exec_module() so __spec__/__file__ look normal
"""

import importlib.machinery
import importlib.util
from collections.abc import Mapping
from pathlib import Path

from callhub.core.domain_types import ModuleHandle
from callhub.core.errors import ModuleLoadError

EXPORTS_ATTRIBUTE = "FUNCTIONS"
_NAMESPACE = "callhub_handlers"


class _FreshSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that never reads or writes cached bytecode."""

    def get_code(self, fullname):
        return self.source_to_code(self.get_data(self.path), self.path)


def load_handler_module(name: str, path: Path) -> ModuleHandle:
    """Load `path` as handler module `name`."""
    fullname = f"{_NAMESPACE}.{name}"
    loader = _FreshSourceLoader(fullname, str(path))
    spec = importlib.util.spec_from_file_location(fullname, path, loader=loader)
    if spec is None:
        raise ModuleLoadError(name, f"cannot build import spec for {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ModuleLoadError(name, f"{type(e).__name__}: {e}") from e

    exports = getattr(module, EXPORTS_ATTRIBUTE, None)
    if not isinstance(exports, Mapping):
        raise ModuleLoadError(name, f"missing {EXPORTS_ATTRIBUTE} mapping")
    functions = {
        str(key): value for key, value in exports.items() if callable(value)
    }
    return ModuleHandle(name=name, functions=functions, origin=str(path))
