"""MCP server exposing configured commands as tools."""

import logging

from mcp.server.fastmcp import FastMCP

from longrun_mcp.config import ServerConfig, load_config
from longrun_mcp.tools import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "long-run-command-mcp"
TRANSPORTS = ("stdio", "sse", "streamable-http")


def create_server(config: ServerConfig, registry: ToolRegistry = None) -> FastMCP:
    """Build a FastMCP server with one tool per configured command.

    Args:
        config: Loaded server configuration
        registry: Pre-built ToolRegistry; built from config if omitted

    Returns:
        FastMCP server ready to run
    """
    registry = registry or ToolRegistry(config)
    mcp = FastMCP(SERVER_NAME)

    for name, tool_func in registry.tools.items():
        mcp.add_tool(tool_func, name=name, description=tool_func.__tool_schema__["description"])
        logger.info("Registered tool: %s", name)

    return mcp


def run_server(config_path: str, transport: str = "stdio") -> None:
    """Load the configuration and serve until the transport closes.

    Raises:
        ConfigurationError: If the configuration cannot be loaded
    """
    config = load_config(config_path)
    mcp = create_server(config)
    logger.info(
        "Serving %d command(s) over %s, logs in %s",
        len(config.commands), transport, config.outputdir,
    )
    mcp.run(transport=transport)
