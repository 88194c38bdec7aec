"""Change Notifier - set of live listeners and the modules_updated broadcast.

Invariants:
    - add()/remove() are the only mutation points of the listener set
    - broadcast() iterates a snapshot, so listeners may connect/disconnect mid-send
    - A listener whose send fails is pruned; the others still receive the message
"""

import logging
from collections.abc import Iterable
from typing import Any

from callhub.core.domain_types import ModuleDescriptor
from callhub.core.repository_protocols import Listener

logger = logging.getLogger(__name__)

MODULES_UPDATED = "modules_updated"


def modules_updated_event(modules: Iterable[ModuleDescriptor]) -> dict:
    """Wire message sent to every listener when the module set changes."""
    return {
        "type": MODULES_UPDATED,
        "modules": [m.to_dict() for m in modules],
    }


class ListenerHub:
    """Connected live-update listeners."""

    def __init__(self):
        self._listeners: set[Listener] = set()

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Listener) -> None:
        self._listeners.add(listener)
        logger.debug("Listener connected", extra={"listeners": len(self._listeners)})

    def remove(self, listener: Listener) -> None:
        self._listeners.discard(listener)
        logger.debug("Listener removed", extra={"listeners": len(self._listeners)})

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send message to every listener. Returns how many received it."""
        delivered = 0
        for listener in list(self._listeners):
            try:
                await listener.send_json(message)
            except Exception as e:
                logger.info(f"Dropping listener after failed send: {e}")
                self.remove(listener)
                continue
            delivered += 1
        return delivered
