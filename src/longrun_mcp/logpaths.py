"""Log file naming for command executions."""

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

MAX_KEY_LENGTH = 200
DEFAULT_KEY = "default"

_SEPARATORS = re.compile(r"[/\\]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_RESERVED_CHARS = re.compile(r'[<>:"|?*]')
_UNDERSCORE_RUNS = re.compile(r"_{2,}")
_ONLY_DOTS = re.compile(r"^\.+$")


@dataclass(frozen=True)
class LogPaths:
    """Output and error log files for one execution."""

    output_path: Path
    error_path: Path


def _sanitize_once(key: str) -> str:
    sanitized = key.replace("..", "")
    sanitized = _SEPARATORS.sub("_", sanitized)
    sanitized = _CONTROL_CHARS.sub("", sanitized)
    sanitized = _RESERVED_CHARS.sub("_", sanitized)
    sanitized = _UNDERSCORE_RUNS.sub("_", sanitized)
    sanitized = sanitized.strip().strip("_")

    if not sanitized or _ONLY_DOTS.match(sanitized):
        sanitized = DEFAULT_KEY

    return sanitized[:MAX_KEY_LENGTH]


def sanitize_key(key: str) -> str:
    """Convert a command key into a token that is safe inside a file name.

    Removes ``..`` sequences, replaces path separators and reserved characters
    with ``_``, strips control characters, collapses underscores and trims the
    ends. Empty or all-dot results become ``default``; the result is at most
    200 characters.

    The pass is repeated until the result is stable, since stripping a control
    character or truncating can expose a new ``..`` or a trailing ``_``.

    Args:
        key: Raw command key

    Returns:
        Sanitized key
    """
    sanitized = _sanitize_once(key)
    while True:
        again = _sanitize_once(sanitized)
        if again == sanitized:
            return sanitized
        sanitized = again


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def create_log_paths(key: str, output_dir, timestamp: Optional[int] = None) -> LogPaths:
    """Build the output/error log paths for one execution of ``key``.

    Both paths share one millisecond timestamp. Nothing is created on disk.

    Args:
        key: Raw command key
        output_dir: Directory the logs are written to
        timestamp: Millisecond epoch; defaults to now

    Returns:
        LogPaths for ``{timestamp}-{key}-output.log`` and ``{timestamp}-{key}-error.log``
    """
    if timestamp is None:
        timestamp = current_timestamp_ms()

    sanitized = sanitize_key(key)
    output_dir = Path(output_dir)

    return LogPaths(
        output_path=output_dir / f"{timestamp}-{sanitized}-output.log",
        error_path=output_dir / f"{timestamp}-{sanitized}-error.log",
    )
