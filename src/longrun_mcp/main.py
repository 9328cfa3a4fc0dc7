"""Main CLI entry point for longrun-mcp."""

import asyncio
import sys

import click

from longrun_mcp.config import default_config_path, load_config
from longrun_mcp.errors import ConfigurationError
from longrun_mcp.server import TRANSPORTS, run_server
from longrun_mcp.tools import ToolExecutor, ToolRegistry
from longrun_mcp.utils import format_payload, format_with_border, setup_logging

config_option = click.option(
    "-c", "--config", "config_path",
    default=default_config_path,
    show_default="$LONGRUN_MCP_CONFIG or ./config.json",
    help="Path to the JSON configuration file",
)


@click.group()
@click.option(
    "--log-level",
    envvar="LONGRUN_MCP_LOG_LEVEL",
    default="WARNING",
    help="Logging level for messages on stderr (default: WARNING)",
)
def cli(log_level):
    """Expose configured shell commands as MCP tools.

    Examples:

      longrun-mcp serve --config ./config.json

      longrun-mcp run build --config ./config.json -- --verbose

      longrun-mcp tools list
    """
    try:
        setup_logging(log_level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level")


@cli.command()
@config_option
@click.option(
    "--transport",
    type=click.Choice(TRANSPORTS),
    default="stdio",
    help="MCP transport to serve on (default: stdio)",
)
def serve(config_path, transport):
    """Run the MCP server."""
    try:
        run_server(config_path, transport=transport)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


@cli.command()
@config_option
@click.option("-b", "--border", is_flag=True, default=False, help="Format the result inside a border")
@click.argument("key")
@click.argument("extra_args", nargs=-1)
def run(config_path, border, key, extra_args):
    """Run one configured command and print the result.

    Put extra arguments after "--" when they start with a dash.
    """
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    try:
        payload = asyncio.run(ToolExecutor(config).execute(key, list(extra_args) or None))
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    if border:
        click.echo(format_with_border(payload, key))
    else:
        click.echo(format_payload(payload))

    if not payload["success"]:
        sys.exit(1)


@cli.group()
def tools():
    """Inspect the tools generated from the configuration."""
    pass


@tools.command(name="list")
@config_option
def list_tools(config_path):
    """List all configured tools."""
    try:
        registry = ToolRegistry(load_config(config_path))
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    available = registry.list_tools()
    if not available:
        click.echo("No tools available")
        return

    for name, desc in available.items():
        click.echo(f"  {name}")
        click.echo(f"    {desc}")


@tools.command()
@config_option
@click.argument("tool_name")
def show(config_path, tool_name):
    """Show detailed information about a specific tool."""
    try:
        registry = ToolRegistry(load_config(config_path))
        info = registry.get_tool_info(tool_name)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"Tool: {info['name']}")
    click.echo(f"Key: {info['key']}")
    click.echo(f"Command: {info['command']}")
    click.echo(f"Workdir: {info['workdir']}")
    click.echo(f"Description: {info['description']}")
    click.echo()
    click.echo("Parameters:")

    params = info['parameters']
    if params.get('properties'):
        for param_name, param_def in params['properties'].items():
            param_type = param_def.get('type', 'unknown')
            item_type = param_def.get('items', {}).get('type')
            if item_type:
                param_type = f"{param_type} of {item_type}"
            click.echo(f"  {param_name}: {param_type}")
            click.echo(f"    {param_def.get('description', 'No description')}")
    else:
        click.echo("  None")


if __name__ == "__main__":
    cli()
