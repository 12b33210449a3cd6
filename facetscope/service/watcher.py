from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


log = logging.getLogger(__name__)


class _Handler(FileSystemEventHandler):
    def __init__(self, target: Path, on_change: Callable[[Path], None]) -> None:
        super().__init__()
        self.target = target
        self.on_change = on_change

    def _matches(self, raw: str | bytes | None) -> bool:
        if not raw:
            return False
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", "replace")
        return Path(raw).resolve() == self.target

    def on_created(self, event: FileSystemEvent):  # type: ignore[override]
        if not event.is_directory and self._matches(event.src_path):
            self.on_change(self.target)

    def on_modified(self, event: FileSystemEvent):  # type: ignore[override]
        if not event.is_directory and self._matches(event.src_path):
            self.on_change(self.target)

    def on_moved(self, event):  # type: ignore[override]
        # Editors that save atomically rename a temp file onto the target
        if not event.is_directory and self._matches(getattr(event, "dest_path", None)):
            self.on_change(self.target)


class RecordsWatcher:
    """Calls ``on_change(path)`` from a watchdog thread when the records file changes."""

    def __init__(self, path: Path | str, on_change: Callable[[Path], None]) -> None:
        self.path = Path(path).expanduser().resolve()
        self.handler = _Handler(self.path, on_change)
        self._observer: Observer | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            ob = Observer()
            ob.schedule(self.handler, str(self.path.parent), recursive=False)
            ob.daemon = True
            ob.start()
            self._observer = ob
        log.info("Watching %s for changes", self.path)

    def stop(self) -> None:
        with self._lock:
            ob, self._observer = self._observer, None
        if ob is None:
            return
        ob.stop()
        ob.join(timeout=2.0)
