"""Helper functions for the longrun-mcp CLI."""

import json
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.text import Text

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Send log records to stderr; stdout is reserved for the MCP transport.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(stream=sys.stderr, level=numeric_level, format=LOG_FORMAT, force=True)


def format_payload(payload: dict) -> str:
    return json.dumps(payload, indent=2)


def format_with_border(payload: dict, title: str) -> str:
    """Format a result payload inside a rich panel.

    Args:
        payload: Tool result payload
        title: Panel title, usually the command key

    Returns:
        The rendered panel; green border on success, red on failure
    """
    console = Console()
    color = "green" if payload.get("success") else "red"

    panel = Panel(
        Text(format_payload(payload)),
        border_style=Style(color=color, bold=True),
        padding=(1, 2),
        expand=False,
        title=f"[bold]{escape(title)}[/bold]",
        title_align="center",
    )

    with console.capture() as capture:
        console.print(panel)

    return capture.get().rstrip()
