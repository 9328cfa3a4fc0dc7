"""Tool registry and execution for configured commands."""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from longrun_mcp.config import CommandDefinition, ServerConfig
from longrun_mcp.errors import CommandError, ConfigurationError
from longrun_mcp.executor import ExecutionRequest, execute

logger = logging.getLogger(__name__)

_UNSAFE_TOOL_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def tool(name: str, description: str, parameters: Dict[str, Any]):
    """Decorator to attach tool metadata to a function.

    Args:
        name: Tool name exposed to clients
        description: Human-readable description of what the tool does
        parameters: JSON Schema for tool parameters
    """
    def decorator(func):
        func.__tool_name__ = name
        func.__tool_schema__ = {
            "name": name,
            "description": description,
            "parameters": parameters
        }
        return func
    return decorator


def tool_name_for_key(key: str) -> str:
    """Tool name for a command key: ``run_`` plus the key restricted to [A-Za-z0-9_-]."""
    return "run_" + _UNSAFE_TOOL_NAME_CHARS.sub("_", key)


def build_parameters(allow_extra_args: bool) -> Dict[str, Any]:
    """JSON Schema for a command tool's input."""
    properties = {}
    if allow_extra_args:
        properties["args"] = {
            "type": "array",
            "items": {"type": "string"},
            "description": "Additional arguments appended to the command"
        }
    return {
        "type": "object",
        "properties": properties,
        "additionalProperties": False
    }


def describe_command(key: str, definition: CommandDefinition) -> str:
    if definition.description:
        return definition.description
    return f"Execute {key} command: {definition.command} (workdir: {definition.workdir})"


class ToolExecutor:
    """Runs configured commands and formats results as tool payloads."""

    def __init__(self, config: ServerConfig):
        """Initialize executor with a loaded configuration.

        Args:
            config: ServerConfig the commands are taken from
        """
        self.config = config

    async def execute(self, key: str, extra_args: Optional[Sequence[str]] = None) -> dict:
        """Execute a command and return its result payload.

        Failures never propagate; they are reported as ``success: False``.

        Args:
            key: Command key from the configuration
            extra_args: Optional caller-supplied arguments

        Returns:
            On success:
            {
                "success": True,
                "command": "...",
                "workdir": "...",
                "outputPath": "...",
                "errorPath": "...",
                "exitCode": 0,
                "executionTimeMs": 12
            }
            On failure:
            {"success": False, "error": "..."}
        """
        try:
            definition = self.config.get_command(key)
            result = await execute(ExecutionRequest(key=key, extra_args=extra_args), self.config)
        except CommandError as e:
            logger.info("Command '%s' rejected: %s", key, e.message)
            return {"success": False, "error": e.message}
        except Exception as e:
            logger.exception("Unexpected error while running command '%s'", key)
            return {"success": False, "error": f"Command execution failed: {str(e)}"}

        return {
            "success": True,
            "command": definition.command,
            "workdir": definition.workdir,
            "outputPath": str(result.output_path),
            "errorPath": str(result.error_path),
            "exitCode": result.exit_code,
            "executionTimeMs": result.execution_time_ms
        }


def make_command_tool(key: str, definition: CommandDefinition, executor: ToolExecutor) -> Callable:
    """Build the async tool function for one configured command.

    The function signature matches the declared parameters, so commands
    without ``allow_extra_args`` take no arguments at all.
    """
    name = tool_name_for_key(key)
    description = describe_command(key, definition)
    parameters = build_parameters(definition.allow_extra_args)

    if definition.allow_extra_args:
        @tool(name=name, description=description, parameters=parameters)
        async def run_command(args: Optional[List[Any]] = None) -> dict:
            # Items are checked by validate_extra_args, so non-strings come back as a payload.
            return await executor.execute(key, args)
    else:
        @tool(name=name, description=description, parameters=parameters)
        async def run_command() -> dict:
            return await executor.execute(key)

    run_command.__name__ = name
    run_command.__doc__ = description
    run_command.__command_key__ = key
    return run_command


class ToolRegistry:
    """One tool per configured command."""

    def __init__(self, config: ServerConfig, executor: Optional[ToolExecutor] = None):
        """Build tools for every command in the configuration.

        Args:
            config: Loaded server configuration
            executor: ToolExecutor to run commands with; created from config if omitted

        Raises:
            ConfigurationError: If two command keys map to the same tool name
        """
        self.config = config
        self.executor = executor or ToolExecutor(config)
        self.tools: Dict[str, Callable] = {}
        self._load_command_tools()

    def _load_command_tools(self):
        for key in self.config.available_keys():
            tool_func = make_command_tool(key, self.config.commands[key], self.executor)
            name = tool_func.__tool_name__
            if name in self.tools:
                other = self.tools[name].__command_key__
                raise ConfigurationError(
                    f"Command keys '{other}' and '{key}' both map to tool name '{name}'"
                )
            self.tools[name] = tool_func

    def get_tool_schemas(self) -> list[dict]:
        return [tool_func.__tool_schema__ for tool_func in self.tools.values()]

    def list_tools(self) -> Dict[str, str]:
        """List all tools.

        Returns:
            Dict of {tool_name: description}, sorted by name
        """
        return {
            name: tool_func.__tool_schema__["description"]
            for name, tool_func in sorted(self.tools.items())
        }

    def get_tool_info(self, tool_name: str) -> dict:
        """Get detailed information about a specific tool.

        Args:
            tool_name: Name of the tool

        Returns:
            Dict with tool details

        Raises:
            ValueError: If tool not found
        """
        if tool_name not in self.tools:
            raise ValueError(f"Tool not found: {tool_name}")

        tool_func = self.tools[tool_name]
        key = tool_func.__command_key__
        definition = self.config.commands[key]
        schema = tool_func.__tool_schema__

        return {
            "name": tool_name,
            "key": key,
            "command": definition.command,
            "workdir": definition.workdir,
            "description": schema["description"],
            "parameters": schema["parameters"]
        }
