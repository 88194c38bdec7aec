"""Module Watcher - watchdog observer on scripts_dir feeding modules_updated broadcasts.

Invariants:
    - Observer thread never touches the registry or listeners; it only hands the
      event to the event loop (call_soon_threadsafe)
    - Bursts of events collapse into one refresh after `debounce` seconds; an event
      arriving during a refresh schedules one more
    - Only created/modified/deleted/moved count; __pycache__, hidden and editor
      temp files and directory-modified noise are ignored
    - A failing refresh is logged and does not stop the watcher

Design Decisions:
    - list_all() runs in a worker thread: it executes handler module code
"""

import asyncio
import logging
import os
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from callhub.services.change_notifier import ListenerHub, modules_updated_event
from callhub.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)

_RELEVANT_EVENTS = frozenset({
    EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED,
})
_IGNORED_SUFFIXES = (".pyc", ".swp", ".swx", ".tmp", "~")


def _is_noise(raw) -> bool:
    path = Path(os.fsdecode(raw))
    return (
        "__pycache__" in path.parts
        or path.name.startswith(".")
        or path.name.endswith(_IGNORED_SUFFIXES)
    )


def should_ignore_event(event: FileSystemEvent) -> bool:
    """True for events that cannot change the module listing."""
    if event.event_type not in _RELEVANT_EVENTS:
        return True
    if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
        return True
    paths = [p for p in (event.src_path, getattr(event, "dest_path", "")) if p]
    return all(_is_noise(p) for p in paths)


class _ScriptsEventHandler(FileSystemEventHandler):
    """Forwards relevant watchdog events to the watcher (observer thread)."""

    def __init__(self, watcher: "ModuleWatcher"):
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if should_ignore_event(event):
            return
        logger.debug(f"Scripts change observed: {event.event_type} {event.src_path}")
        self._watcher.notify_change_threadsafe()


class ModuleWatcher:
    """Watches scripts_dir and broadcasts the module list on change."""

    def __init__(
        self,
        scripts_dir: Path,
        registry: ModuleRegistry,
        hub: ListenerHub,
        debounce: float = 0.2,
    ):
        self.scripts_dir = Path(scripts_dir)
        self._registry = registry
        self._hub = hub
        self._debounce = debounce
        self._observer: Observer | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None
        self._dirty = False

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Begin watching. Must be called from the event loop thread."""
        if self._observer is not None:
            return
        self._loop = asyncio.get_running_loop()
        self.scripts_dir.mkdir(parents=True, exist_ok=True)
        observer = Observer()
        observer.schedule(
            _ScriptsEventHandler(self), str(self.scripts_dir), recursive=True,
        )
        observer.start()
        self._observer = observer
        logger.info(f"Watching handler modules in {self.scripts_dir}")

    async def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            await asyncio.to_thread(observer.join, 5)
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    def notify_change_threadsafe(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.notify_change)

    def notify_change(self) -> None:
        """Mark the listing stale and make sure a refresh is pending."""
        self._dirty = True
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._dirty:
            await asyncio.sleep(self._debounce)
            self._dirty = False
            await self.refresh()

    async def refresh(self) -> int:
        """Rescan modules and broadcast. Returns listeners reached."""
        try:
            modules = await asyncio.to_thread(self._registry.list_all)
            delivered = await self._hub.broadcast(modules_updated_event(modules))
        except Exception as e:
            logger.error(f"Module refresh failed: {e}", exc_info=True)
            return 0
        logger.info(
            f"Broadcast {len(modules)} module(s) to {delivered} listener(s)",
            extra={"listeners": delivered},
        )
        return delivered
