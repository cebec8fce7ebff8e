"""
Git Subprocess Utilities

Common patterns for executing git commands with consistent error handling.
"""

import subprocess
from typing import Optional

from codecontext.configs.constants import get_timeout
from codecontext.configs.logging import get_logger
from codecontext.exceptions import GitCommandError

logger = get_logger("git.subprocess")

# Default timeout for git commands
GIT_TIMEOUT = int(get_timeout("git_command", 10))


def run_git_command(
    args: list[str],
    cwd: str,
    timeout: int | None = None,
) -> tuple[int, str, str]:
    """
    Low-level wrapper around subprocess.run for git commands.

    Args:
        args: Git command arguments (without 'git' prefix)
        cwd: Working directory
        timeout: Timeout in seconds (defaults to config value)

    Returns:
        Tuple of (returncode, stdout, stderr)

    Raises:
        GitCommandError: On FileNotFoundError or TimeoutExpired
    """
    if timeout is None:
        timeout = GIT_TIMEOUT
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
        return result.returncode, result.stdout, result.stderr
    except FileNotFoundError:
        raise GitCommandError("git not found in PATH")
    except NotADirectoryError:
        raise GitCommandError(f"Not a directory: {cwd}")
    except subprocess.TimeoutExpired:
        raise GitCommandError(f"git command timed out after {timeout}s: {args}")


def git_check(
    args: list[str],
    cwd: str,
    timeout: int | None = None,
) -> bool:
    """
    Execute git command and check if successful (returncode == 0).

    Used for: is_git_repository(), validation checks

    Returns:
        True if returncode is 0, False otherwise
    """
    try:
        returncode, _, _ = run_git_command(args, cwd, timeout)
        return returncode == 0
    except GitCommandError:
        return False


def git_single_line(
    args: list[str],
    cwd: str,
    timeout: int = 5,
) -> Optional[str]:
    """
    Execute git command and extract single string value from stdout.

    Used for: repository root retrieval

    Returns:
        Stripped stdout line or None if command fails
    """
    try:
        returncode, stdout, _ = run_git_command(args, cwd, timeout)
        if returncode == 0:
            return stdout.strip()
    except GitCommandError as e:
        logger.debug(f"git {' '.join(args)} failed: {e}")
    return None
