"""Gates run before a command is allowed to reach the shell."""

import os
import re
from pathlib import Path
from typing import Sequence

from longrun_mcp.errors import ArgumentRejected, WorkdirNotFound

# Shell operators, command substitution, variable expansion and line breaks.
# A bare "$" covers both "$(" and "${".
FORBIDDEN_ARGUMENT_PATTERN = re.compile(r"[;&|<>`$\r\n]")


def find_forbidden_characters(arg: str) -> list[str]:
    """Return the distinct forbidden characters in ``arg``, in order of appearance."""
    found = []
    for match in FORBIDDEN_ARGUMENT_PATTERN.finditer(arg):
        char = match.group()
        if char not in found:
            found.append(char)
    return found


def validate_extra_args(args: Sequence[str]) -> None:
    """Reject a batch of caller-supplied arguments if any contains shell metacharacters.

    Validation is all-or-nothing: one bad argument rejects the whole batch.

    Args:
        args: Extra arguments to append to a configured command

    Raises:
        ArgumentRejected: If any argument is not a string or contains a forbidden character
    """
    forbidden = []
    for arg in args:
        if not isinstance(arg, str):
            raise ArgumentRejected(f"Additional arguments must be strings, got {type(arg).__name__}")
        for char in find_forbidden_characters(arg):
            if char not in forbidden:
                forbidden.append(char)

    if forbidden:
        shown = " ".join(repr(char) for char in forbidden)
        raise ArgumentRejected(f"Invalid characters in additional arguments: {shown}")


def validate_workdir(workdir: str) -> Path:
    """Resolve a working directory and confirm it is an accessible directory.

    Args:
        workdir: Working directory from the command definition

    Returns:
        The resolved absolute path

    Raises:
        WorkdirNotFound: If the directory does not exist or cannot be entered
    """
    absolute_workdir = Path(workdir).expanduser().resolve()
    if not absolute_workdir.is_dir() or not os.access(absolute_workdir, os.X_OK):
        raise WorkdirNotFound(absolute_workdir)
    return absolute_workdir
