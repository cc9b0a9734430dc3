"""Timestamped output + GitHub Actions error annotations."""

import os
import sys
from datetime import datetime

_verbose: bool | None = None


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _is_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def set_verbose(enabled: bool | None) -> None:
    """Force debug output on/off. ``None`` defers to PROC_RUNNER_DEBUG."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    if _verbose is not None:
        return _verbose
    return os.environ.get("PROC_RUNNER_DEBUG", "").lower() in ("1", "true", "yes")


def info(msg: str, err: bool = False) -> None:
    """Print a timestamped line; *err* sends it to stderr instead of stdout."""
    print(f"[{_timestamp()}] {msg}", file=sys.stderr if err else sys.stdout, flush=True)


def debug(msg: str) -> None:
    if is_verbose():
        print(f"[{_timestamp()}] DEBUG: {msg}", file=sys.stderr, flush=True)


def error(msg: str) -> None:
    if _is_github_actions():
        # Workflow commands are single-line
        annotation = msg.replace("%", "%25").replace("\n", "%0A")
        print(f"::error::{annotation}", flush=True)
    print(f"[{_timestamp()}] ERROR: {msg}", file=sys.stderr, flush=True)
