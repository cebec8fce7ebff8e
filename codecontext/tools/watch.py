"""
Watch Tool
"""

import threading
from typing import Optional

from codecontext.configs.logging import get_logger
from codecontext.configs.services import get_server_state

logger = get_logger("tools.watch")

SHUTTING_DOWN = "Server is shutting down, cannot process watch changes"


def watch_changes(
    enable: bool,
    target_dir: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Start or stop re-analysis on file changes. Both directions are idempotent.

    Enabling analyzes the target once before the watcher starts.
    """
    state = get_server_state()
    if not enable:
        if state.stop_watcher():
            return "File watching disabled"
        return "File watching is not currently enabled"

    if state.stopped:
        return SHUTTING_DOWN
    if state.watcher is not None:
        return "File watching is already enabled"

    resolved = state.resolve_target_dir(target_dir)
    state.refresh_analysis(resolved, cancel_event=cancel_event)
    if not state.start_watcher(resolved):
        if state.stopped:
            return SHUTTING_DOWN
        return "File watching is already enabled"
    logger.info(f"File watching enabled for {resolved}")
    return "File watching enabled. Real-time change notifications are now active."
