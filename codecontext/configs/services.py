"""
Shared Server State

Process-wide state shared by all MCP tools: the configured target
directory, the graph builder, the most recently published graph, and the
file watcher.

Builds are serialized by an analysis lock. A finished graph is published by
swapping a single reference under a short lock, so readers holding an older
graph keep a complete, sealed snapshot.
"""

import os
import threading
from threading import Lock, RLock
from typing import Optional

from codecontext.analyzer.builder import GraphBuilder
from codecontext.configs.logging import get_logger
from codecontext.configs.paths import expand_home
from codecontext.configs.runtime import get_full_config
from codecontext.git.neighborhoods import SemanticConfig
from codecontext.graph.store import CodeGraph
from codecontext.watcher import FileWatcher

logger = get_logger("services")


class ServerState:
    """
    Thread-safe holder for the server's builder, graph, and watcher.

    Args:
        config: Runtime configuration as returned by ``get_full_config``
    """

    def __init__(self, config: Optional[dict] = None):
        self.config = config if config is not None else get_full_config()
        self.target_dir = os.path.abspath(self.config.get("target_dir") or os.getcwd())

        self.builder = GraphBuilder(
            semantic_config=SemanticConfig(
                analysis_period_days=int(self.config.get("analysis_period_days", 30)),
            ),
        )
        self.builder.set_use_default_excludes(bool(self.config.get("use_default_excludes", True)))
        self.builder.set_exclude_patterns(list(self.config.get("exclude_patterns") or []))
        self.builder.set_progress_config(interval=int(self.config.get("progress_interval", 10)))
        self.builder.set_enable_dart(bool(self.config.get("enable_dart", False)))
        self.builder.set_progress_callback(lambda message: logger.info(message))

        self._graph: Optional[CodeGraph] = None
        self._graph_lock = Lock()
        self._analysis_lock = Lock()
        self._stop_lock = Lock()
        self._stopped = False
        self._watch_lock = RLock()
        self.watcher: Optional[FileWatcher] = None

    # --- Target directory ---

    def resolve_target_dir(self, target_dir: Optional[str] = None) -> str:
        """Empty means the configured default; ``~/`` expands to the home directory."""
        if not target_dir:
            return self.target_dir
        return os.path.abspath(expand_home(target_dir))

    # --- Graph publication ---

    @property
    def graph(self) -> Optional[CodeGraph]:
        with self._graph_lock:
            return self._graph

    def publish(self, graph: CodeGraph) -> None:
        with self._graph_lock:
            self._graph = graph

    def refresh_analysis(
        self,
        target_dir: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CodeGraph:
        """
        Analyze ``target_dir`` (default: configured target) and publish the graph.

        Nothing is published when the build raises.
        """
        resolved = self.resolve_target_dir(target_dir)
        with self._analysis_lock:
            graph = self.builder.analyze(resolved, cancel_event=cancel_event)
        self.publish(graph)
        logger.info(f"Published graph for {resolved}: {len(graph.files)} files, {len(graph.symbols)} symbols")
        return graph

    # --- Watcher lifecycle ---

    @property
    def stopped(self) -> bool:
        with self._stop_lock:
            return self._stopped

    def start_watcher(self, target_dir: str) -> bool:
        """
        Start watching ``target_dir``.

        Returns False if a watcher already runs or the server is stopped.
        """
        with self._watch_lock:
            if self.watcher is not None or self.stopped:
                return False
            watcher = FileWatcher(
                target_dir,
                on_change=lambda changes: self.refresh_analysis(target_dir),
                debounce_ms=int(self.config.get("debounce_ms", 500)),
                is_relevant=lambda path: self._is_watched(path, target_dir),
            )
            watcher.start()
            self.watcher = watcher
            return True

    def _is_watched(self, path: str, root: str) -> bool:
        matcher = self.builder.matcher
        if not self.builder.parser.is_supported_file(path):
            return False
        return not matcher.should_skip(matcher.normalize(os.path.relpath(path, root)))

    def stop_watcher(self) -> bool:
        """Stop the watcher; returns False if none was running."""
        with self._watch_lock:
            watcher, self.watcher = self.watcher, None
        if watcher is None:
            return False
        watcher.stop()
        return True

    def stop(self) -> None:
        """Mark the server stopped and tear down the watcher. Safe to call twice."""
        with self._stop_lock:
            self._stopped = True
        self.stop_watcher()


# Module-level singleton instance
_state: Optional[ServerState] = None
_state_lock = RLock()


def get_server_state() -> ServerState:
    """Get (creating on first use) the shared ServerState."""
    global _state
    if _state is None:
        with _state_lock:
            if _state is None:
                _state = ServerState()
    return _state


def reset_server_state(config: Optional[dict] = None) -> ServerState:
    """Replace the shared state (for tests and ``main``); stops the old watcher."""
    global _state
    with _state_lock:
        if _state is not None:
            _state.stop()
        _state = ServerState(config)
        return _state
