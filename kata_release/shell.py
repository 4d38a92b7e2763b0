"""Shell, git and gh utilities.

Thin wrappers around subprocess calls for the external tools the release
coordinator drives, plus output formatting helpers. Every wrapper takes an
explicit working directory so callers never change the process cwd.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import NoReturn


def _run_tool(tool: str, args: tuple[str, ...], cwd: Path | None, check: bool) -> str:
    result = subprocess.run(
        [tool, *args], capture_output=True, text=True, cwd=cwd, check=False
    )
    if check and result.returncode != 0:
        details = (result.stderr or result.stdout).strip()
        fatal(f"Command failed: {tool} {' '.join(args)}\n{details}")
    return result.stdout.strip()


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "fetch", "origin", "--tags").
        cwd: Directory to run in (a repository clone).
        check: If True (default), exit with an error on non-zero status.
               Set to False for probes that may legitimately fail
               (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.
    """
    return _run_tool("git", args, cwd, check)


def gh(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a GitHub CLI command and return stdout."""
    return _run_tool("gh", args, cwd, check)


def succeeds(*args: str, cwd: Path | None = None) -> bool:
    """Return True when the command exits with status 0.

    Output is discarded. Used for existence checks such as
    ``gh release view <tag>``.
    """
    result = subprocess.run(args, capture_output=True, text=True, cwd=cwd, check=False)
    return result.returncode == 0


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the stages of a release run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print an informational line."""
    print(f"INFO: {msg}")


def fatal(msg: str) -> NoReturn:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
