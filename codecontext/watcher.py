"""
File Watcher

Watches a target directory with watchdog and calls back once changes have
settled for the debounce period.

Watchdog callbacks run on the observer thread; the debounce timer runs on
its own thread, so pending changes are guarded by a lock.
"""

import os
import threading
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from codecontext.configs.constants import DEFAULT_DEBOUNCE_MS
from codecontext.configs.logging import get_logger

logger = get_logger("watcher")

ChangeCallback = Callable[[list[str]], None]


class SourceEventHandler(FileSystemEventHandler):
    """Forwards file events whose path passes ``is_relevant``."""

    def __init__(self, is_relevant: Callable[[str], bool], on_event: Callable[[str], None]):
        super().__init__()
        self.is_relevant = is_relevant
        self.on_event = on_event

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        paths = [str(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(str(dest))
        for path in paths:
            if self.is_relevant(path):
                logger.debug(f"File event: {event.event_type} - {path}")
                self.on_event(path)


class FileWatcher:
    """
    Debounced recursive watcher for one directory.

    ``start`` and ``stop`` are idempotent.
    """

    def __init__(
        self,
        target_dir: str,
        on_change: ChangeCallback,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        is_relevant: Optional[Callable[[str], bool]] = None,
    ):
        self.target_dir = os.path.abspath(target_dir)
        self.on_change = on_change
        self.debounce_seconds = max(debounce_ms, 0) / 1000.0
        self.is_relevant = is_relevant or (lambda path: True)

        self._lock = threading.Lock()
        self._pending: set[str] = set()
        self._timer: Optional[threading.Timer] = None
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            observer = Observer()
            observer.schedule(
                SourceEventHandler(self.is_relevant, self._record),
                self.target_dir,
                recursive=True,
            )
            observer.daemon = True
            observer.start()
            self._observer = observer
        logger.info(f"Watching {self.target_dir} (debounce={self.debounce_seconds * 1000:.0f}ms)")

    def stop(self) -> None:
        with self._lock:
            observer, self._observer = self._observer, None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
        logger.info(f"Stopped watching {self.target_dir}")

    def _record(self, path: str) -> None:
        with self._lock:
            if self._observer is None:
                return
            self._pending.add(path)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._flush)
            self._timer.daemon = True
            self._timer.start()

    def _flush(self) -> None:
        with self._lock:
            changes = sorted(self._pending)
            self._pending.clear()
            self._timer = None
        if not changes:
            return
        logger.info(f"{len(changes)} file(s) changed, re-analyzing")
        try:
            self.on_change(changes)
        except Exception as e:
            # Keep watching after a failed rebuild; the next change retries
            logger.error(f"Re-analysis after file change failed: {e}", exc_info=True)
