"""Shell command construction and process execution."""

import asyncio
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from longrun_mcp.config import ServerConfig
from longrun_mcp.errors import ArgumentRejected, ExecutionError, SpawnFailure
from longrun_mcp.logpaths import LogPaths, create_log_paths
from longrun_mcp.validation import validate_extra_args, validate_workdir

logger = logging.getLogger(__name__)

# Some platforms report process exit before the redirected files are closed.
EXIT_GRACE_SECONDS = 0.1


@dataclass(frozen=True)
class ExecutionRequest:
    """A request to run one configured command."""

    key: str
    extra_args: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a command that ran to completion."""

    output_path: Path
    error_path: Path
    exit_code: int
    execution_time_ms: int


def quote_argument(arg: str, platform: str = sys.platform) -> str:
    """Wrap an argument in double quotes, escaping embedded double quotes.

    Backslashes are doubled only for POSIX sh; cmd.exe treats them literally.
    """
    if platform != "win32":
        arg = arg.replace("\\", "\\\\")
    escaped = arg.replace('"', '\\"')
    return f'"{escaped}"'


def quote_path(path, platform: str = sys.platform) -> str:
    """Double-quote a log path so the shell takes it literally.

    Sanitized keys may still contain ``$`` or backticks, which sh would
    expand inside double quotes.
    """
    text = str(path)
    if platform != "win32":
        for char in ("\\", '"', "$", "`"):
            text = text.replace(char, "\\" + char)
    return f'"{text}"'


def build_command_line(
    command: str,
    extra_args: Optional[Sequence[str]] = None,
    platform: str = sys.platform,
) -> str:
    """Append quoted extra arguments to a base command.

    Args:
        command: Configured base command
        extra_args: Already validated extra arguments
        platform: Host platform the line is built for

    Returns:
        The command line without redirections
    """
    if not extra_args:
        return command
    return " ".join([command] + [quote_argument(arg, platform) for arg in extra_args])


def build_redirected_command(line: str, log_paths: LogPaths, platform: str = sys.platform) -> str:
    """Redirect stdout and stderr of ``line`` into the log files."""
    output_path = quote_path(log_paths.output_path, platform)
    error_path = quote_path(log_paths.error_path, platform)
    return f"{line} > {output_path} 2> {error_path}"


def shell_invocation(line: str, platform: str = sys.platform) -> List[str]:
    """Return the argv that runs ``line`` through the host shell."""
    if platform == "win32":
        return ["cmd.exe", "/c", line]
    return ["/bin/sh", "-c", line]


def normalize_exit_code(returncode: Optional[int]) -> int:
    """Map a missing or signal-derived return code to 0.

    A negative return code means the shell itself was killed by a signal;
    it is reported as 0 and logged so the loss of information is visible.
    """
    if returncode is None:
        logger.warning("Process finished without an exit code; reporting 0")
        return 0
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        logger.warning("Process was terminated by signal %s; reporting exit code 0", name)
        return 0
    return returncode


async def run_shell_command(line: str, workdir: Path, log_paths: LogPaths) -> ExecutionResult:
    """Run a command line through the shell with its streams redirected to log files.

    The output directory is created first so the redirection cannot fail on a
    missing directory. The call returns once the child has exited and the
    grace period has passed.

    Args:
        line: Command line without redirections
        workdir: Resolved working directory
        log_paths: Files receiving stdout and stderr

    Returns:
        ExecutionResult with the normalized exit code and elapsed milliseconds

    Raises:
        SpawnFailure: If the shell cannot be started
        ExecutionError: If waiting on the process fails
    """
    log_paths.output_path.parent.mkdir(parents=True, exist_ok=True)

    argv = shell_invocation(build_redirected_command(line, log_paths))
    logger.debug("Spawning %s in %s", argv, workdir)

    start = time.monotonic()
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(workdir),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        raise SpawnFailure(f"Command execution failed: {e.strerror or str(e)}")

    try:
        returncode = await process.wait()
    except OSError as e:
        raise ExecutionError(f"Command execution failed: {str(e)}")
    elapsed_ms = max(0, int((time.monotonic() - start) * 1000))

    await asyncio.sleep(EXIT_GRACE_SECONDS)

    return ExecutionResult(
        output_path=log_paths.output_path,
        error_path=log_paths.error_path,
        exit_code=normalize_exit_code(returncode),
        execution_time_ms=elapsed_ms,
    )


async def execute(request: ExecutionRequest, config: ServerConfig) -> ExecutionResult:
    """Validate a request against the configuration and run it.

    Every gate runs before anything touches the filesystem: unknown key,
    argument policy, argument content, working directory.

    Args:
        request: Command key and optional extra arguments
        config: Loaded server configuration

    Returns:
        ExecutionResult for the finished command

    Raises:
        ConfigurationError: Unknown command key
        ArgumentRejected: Extra arguments not allowed or containing forbidden characters
        WorkdirNotFound: Working directory missing
        SpawnFailure: Shell could not be started
        ExecutionError: Any other process failure
    """
    definition = config.get_command(request.key)
    extra_args = list(request.extra_args or [])

    if extra_args:
        if not definition.allow_extra_args:
            raise ArgumentRejected(f"Additional arguments are not allowed for command: {request.key}")
        validate_extra_args(extra_args)

    workdir = validate_workdir(definition.workdir)
    log_paths = create_log_paths(request.key, config.outputdir)
    line = build_command_line(definition.command, extra_args)

    logger.info("Running '%s' (%s) in %s", request.key, line, workdir)
    result = await run_shell_command(line, workdir, log_paths)
    logger.info(
        "Command '%s' exited with code %d after %d ms",
        request.key, result.exit_code, result.execution_time_ms,
    )
    return result
