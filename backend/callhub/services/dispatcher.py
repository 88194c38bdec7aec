"""Dispatcher - parse -> resolve -> coerce -> invoke -> persist, as one envelope.

Invariants:
    - execute() never raises; it returns {"success": value} or {"error": message}
    - Parse, resolution and invocation failures return immediately and persist nothing
    - A persistence failure after a successful call is logged, and the caller
      still gets the success envelope
    - The success value is the raw handler result (serialization is the caller's job)

Design Decisions:
    - Persistence is awaited before returning so /history reflects the call at once
    - Catch-all branch for unexpected exceptions: logged with traceback, reported
      as an error envelope like any other failure
"""

import logging
from typing import Any

from callhub.core.coerce_args import coerce_args
from callhub.core.errors import CallHubError
from callhub.core.parse_call import parse_call
from callhub.infrastructure.call_store import CallStore
from callhub.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)


class Dispatcher:
    """Executes call strings against the registry and records results."""

    def __init__(self, registry: ModuleRegistry, store: CallStore):
        self._registry = registry
        self._store = store

    async def execute(self, call_string: str) -> dict[str, Any]:
        try:
            parsed = parse_call(call_string)
            handle = self._registry.resolve(parsed.module_name)
            args = coerce_args(parsed.raw_args)
            result = await self._registry.invoke(
                handle, parsed.function_name, args,
            )
        except CallHubError as e:
            logger.warning(
                f"Call failed: {e.message}",
                extra={"call_string": call_string, "error_code": e.code},
            )
            return {"error": e.message}
        except Exception as e:
            logger.error(
                f"Unexpected dispatch failure: {e}",
                extra={"call_string": call_string},
                exc_info=True,
            )
            return {"error": str(e) or type(e).__name__}

        await self._persist(call_string, result)
        return {"success": result}

    async def _persist(self, call_string: str, result: Any) -> None:
        try:
            await self._store.save(call_string, result)
        except Exception as e:
            logger.error(
                f"Failed to save call record, returning result anyway: {e}",
                extra={"call_string": call_string},
            )
