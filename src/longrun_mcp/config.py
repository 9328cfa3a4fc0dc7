"""Configuration file loading and validation."""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from longrun_mcp.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "./config.json"


class CommandDefinition(BaseModel):
    """A single administrator-declared command."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    workdir: str = Field(min_length=1)
    command: str = Field(min_length=1)
    allow_extra_args: bool = Field(
        default=False,
        validation_alias=AliasChoices("additionalArgs", "allowExtraArgs", "allow_extra_args"),
    )
    description: Optional[str] = None


class ServerConfig(BaseModel):
    """Validated server configuration: output directory and command table."""

    model_config = ConfigDict(frozen=True)

    outputdir: str = Field(min_length=1)
    commands: Dict[str, CommandDefinition]

    def get_command(self, key: str) -> CommandDefinition:
        """Look up a command definition by key.

        Raises:
            ConfigurationError: If no command is configured under ``key``
        """
        command = self.commands.get(key)
        if command is None:
            raise ConfigurationError(f"Unknown command key: {key}")
        return command

    def available_keys(self) -> List[str]:
        return list(self.commands.keys())


def default_config_path() -> str:
    """Config path from LONGRUN_MCP_CONFIG, falling back to ./config.json."""
    return os.getenv("LONGRUN_MCP_CONFIG") or DEFAULT_CONFIG_PATH


def _format_validation_error(error: ValidationError) -> str:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "config"
        details.append(f"{location}: {item['msg']}")
    return "Config validation error: " + "; ".join(details)


def parse_config(data: object, base_dir: Optional[Path] = None) -> ServerConfig:
    """Validate parsed JSON data into a ServerConfig.

    Relative ``outputdir`` and ``workdir`` values are resolved against
    ``base_dir`` when one is given.

    Args:
        data: Parsed JSON document
        base_dir: Directory that relative paths are resolved against

    Returns:
        Validated ServerConfig

    Raises:
        ConfigurationError: If the document does not match the expected structure
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Config validation error: config must be an object")

    try:
        config = ServerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e))

    if base_dir is None:
        return config

    commands = {
        key: definition.model_copy(update={"workdir": str((base_dir / definition.workdir).resolve())})
        for key, definition in config.commands.items()
    }
    return config.model_copy(update={
        "outputdir": str((base_dir / config.outputdir).resolve()),
        "commands": commands,
    })


def load_config(config_path: str) -> ServerConfig:
    """Load and validate a configuration file.

    Args:
        config_path: Path to the JSON configuration file

    Returns:
        ServerConfig with absolute output and working directories

    Raises:
        ConfigurationError: If the file is missing, unreadable, not JSON, or invalid
    """
    absolute_path = Path(config_path).expanduser().resolve()

    if not absolute_path.is_file():
        raise ConfigurationError(f"Config file not found: {absolute_path}")

    try:
        with open(absolute_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file: {str(e)}")
    except PermissionError:
        raise ConfigurationError(f"Permission denied reading config file: {absolute_path}")

    return parse_config(data, base_dir=absolute_path.parent)
