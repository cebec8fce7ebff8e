"""
Tests for FileWatcher

Debounce behavior is driven directly through the recording hook so the
tests do not depend on filesystem event timing.
"""

import threading
import time

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileMovedEvent, FileOpenedEvent

from codecontext.watcher import FileWatcher, SourceEventHandler


class TestSourceEventHandler:
    """Test event filtering."""

    def test_relevant_file_forwarded(self):
        seen = []
        handler = SourceEventHandler(lambda path: path.endswith(".ts"), seen.append)
        handler.on_any_event(FileCreatedEvent("/p/a.ts"))
        handler.on_any_event(FileCreatedEvent("/p/a.png"))
        assert seen == ["/p/a.ts"]

    def test_directories_and_opens_ignored(self):
        seen = []
        handler = SourceEventHandler(lambda path: True, seen.append)
        handler.on_any_event(DirCreatedEvent("/p/src"))
        handler.on_any_event(FileOpenedEvent("/p/a.ts"))
        assert seen == []

    def test_move_reports_both_paths(self):
        seen = []
        handler = SourceEventHandler(lambda path: True, seen.append)
        handler.on_any_event(FileMovedEvent("/p/old.ts", "/p/new.ts"))
        assert seen == ["/p/old.ts", "/p/new.ts"]


class TestFileWatcher:
    """Test lifecycle and debouncing."""

    def test_start_stop_idempotent(self, temp_dir):
        watcher = FileWatcher(str(temp_dir), on_change=lambda changes: None)
        assert not watcher.running
        watcher.start()
        watcher.start()
        assert watcher.running
        watcher.stop()
        watcher.stop()
        assert not watcher.running

    def test_changes_are_debounced(self, temp_dir):
        calls = []
        done = threading.Event()

        def on_change(changes):
            calls.append(changes)
            done.set()

        watcher = FileWatcher(str(temp_dir), on_change=on_change, debounce_ms=50)
        watcher.start()
        try:
            watcher._record("/p/b.ts")
            watcher._record("/p/a.ts")
            watcher._record("/p/b.ts")
            assert done.wait(timeout=5)
        finally:
            watcher.stop()
        assert calls == [["/p/a.ts", "/p/b.ts"]]

    def test_events_ignored_when_stopped(self, temp_dir):
        calls = []
        watcher = FileWatcher(str(temp_dir), on_change=calls.append, debounce_ms=10)
        watcher._record("/p/a.ts")
        time.sleep(0.1)
        assert calls == []

    def test_failed_rebuild_keeps_watching(self, temp_dir):
        attempts = []
        done = threading.Event()

        def on_change(changes):
            attempts.append(changes)
            if len(attempts) == 2:
                done.set()
            raise RuntimeError("rebuild failed")

        watcher = FileWatcher(str(temp_dir), on_change=on_change, debounce_ms=10)
        watcher.start()
        try:
            watcher._record("/p/a.ts")
            time.sleep(0.2)
            watcher._record("/p/b.ts")
            assert done.wait(timeout=5)
            assert watcher.running
        finally:
            watcher.stop()

    def test_real_file_event(self, temp_dir):
        done = threading.Event()
        changes = []

        def on_change(paths):
            changes.extend(paths)
            done.set()

        watcher = FileWatcher(
            str(temp_dir),
            on_change=on_change,
            debounce_ms=50,
            is_relevant=lambda path: path.endswith(".py"),
        )
        watcher.start()
        try:
            (temp_dir / "module.py").write_text("X = 1\n")
            assert done.wait(timeout=10)
        finally:
            watcher.stop()
        assert str(temp_dir / "module.py") in changes
