"""Module Registry - resolves, enumerates and invokes handler modules.

Invariants:
    - Built-in modules (e.g. `db`) win over same-named files in scripts_dir
    - resolve() reloads from disk on every call (hot reload, no process cache)
    - list_all() returns only modules that load right now, sorted by name;
      unloadable files and files shadowed by a built-in are skipped
    - Files whose name starts with "_" are not handler modules
    - invoke() awaits awaitable results and wraps handler exceptions in InvocationError

Design Decisions:
    - Explicit FUNCTIONS export table per module, no reflection over module attributes
    - Registry holds no loaded code between calls; ModuleHandle is per-resolution
"""

import inspect
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from callhub.core.domain_types import ModuleDescriptor, ModuleHandle
from callhub.core.errors import (
    ErrorContext,
    HandlerFunctionNotFoundError,
    HandlerModuleNotFoundError,
    InvocationError,
    ModuleLoadError,
)
from callhub.infrastructure.module_loader import load_handler_module

logger = logging.getLogger(__name__)

HANDLER_SUFFIX = ".py"


class ModuleRegistry:
    """Handler modules from one directory, plus built-in modules."""

    def __init__(
        self,
        scripts_dir: Path,
        builtin_modules: Mapping[str, ModuleHandle] | None = None,
    ):
        self.scripts_dir = Path(scripts_dir)
        self._builtins = dict(builtin_modules or {})

    def module_path(self, name: str) -> Path:
        return self.scripts_dir / f"{name}{HANDLER_SUFFIX}"

    def resolve(self, name: str) -> ModuleHandle:
        """Return a freshly loaded handle for `name`."""
        builtin = self._builtins.get(name)
        if builtin is not None:
            return builtin
        path = self.module_path(name)
        if name.startswith("_") or not path.is_file():
            raise HandlerModuleNotFoundError(name)
        return load_handler_module(name, path)

    def list_all(self) -> list[ModuleDescriptor]:
        """Describe every loadable handler module in scripts_dir."""
        descriptors = []
        for path in self._handler_files():
            try:
                handle = load_handler_module(path.stem, path)
            except ModuleLoadError as e:
                logger.warning(
                    f"Skipping unloadable module: {e.message}",
                    extra={"module_name": path.stem, "error_code": e.code},
                )
                continue
            descriptors.append(handle.describe())
        return descriptors

    def _handler_files(self) -> list[Path]:
        if not self.scripts_dir.is_dir():
            logger.warning(
                f"Scripts directory does not exist: {self.scripts_dir}",
            )
            return []
        return sorted(
            p for p in self.scripts_dir.iterdir()
            if p.suffix == HANDLER_SUFFIX and p.is_file()
            and not p.stem.startswith("_")
            and p.stem not in self._builtins
        )

    async def invoke(
        self, handle: ModuleHandle, function_name: str, args: Sequence[Any],
    ) -> Any:
        """Call handle.function_name(*args), awaiting if needed."""
        func = handle.functions.get(function_name)
        if func is None or not callable(func):
            raise HandlerFunctionNotFoundError(handle.name, function_name)
        try:
            result = func(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise InvocationError(
                str(e) or type(e).__name__,
                ErrorContext(module_name=handle.name, function_name=function_name),
            ) from e
        return result
