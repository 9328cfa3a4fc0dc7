"""Expose configured long-running shell commands as MCP tools."""

__version__ = "1.0.0"
