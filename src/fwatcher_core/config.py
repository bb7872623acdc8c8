"""Configuration parsing for fwatcher."""

import logging
import shlex
from collections.abc import Iterable, Sequence
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from fwatcher_core.actions import Action, ProcessAction
from fwatcher_core.models import WatchConfig
from fwatcher_core.patterns import PatternError, compile_patterns

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0
DEFAULT_INTERVAL = 1.0

# Default config template for Python development workflows
DEFAULT_CONFIG_TEMPLATE = """\
# Auto-generated fwatcher.toml

[watch]
roots = ["."]
patterns = ["**/*.py"]
exclude_patterns = ["**/.git/**", "**/__pycache__/**", "**/.venv/**"]
delay = 2.0
interval = 1.0
restart = false
command = ["pytest"]
"""


class ConfigError(ValueError):
    """Invalid watch configuration."""


def create_default_config(config_path: Path) -> bool:
    """
    Create a default fwatcher.toml if it doesn't exist.

    Args:
        config_path: Path where config should be created

    Returns:
        True if config was created, False if it already exists

    Raises:
        PermissionError: If unable to write to the directory
        OSError: If other file system errors occur
    """
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE)
    return True


def parse_command(command: str | Sequence[str] | None) -> list[str]:
    """Split a command string with shell rules; lists are taken as argv."""
    if command is None:
        return []
    if isinstance(command, str):
        return shlex.split(command)
    return [str(part) for part in command]


def build_watch_config(
    action: Action,
    roots: Iterable[str | Path] = (),
    patterns: Iterable[str] = (),
    exclude_patterns: Iterable[str] = (),
    delay: float = DEFAULT_DELAY,
    interval: float = DEFAULT_INTERVAL,
    restart: bool = False,
) -> WatchConfig:
    """Build a validated WatchConfig.

    Patterns are compiled once here so malformed globs fail before watching starts.

    Raises:
        ConfigError: On malformed patterns or negative durations
    """
    patterns = list(patterns)
    exclude_patterns = list(exclude_patterns)
    try:
        compile_patterns(patterns)
        compile_patterns(exclude_patterns)
        return WatchConfig(
            action=action,
            roots=tuple(Path(r) for r in roots),
            include_patterns=patterns,
            exclude_patterns=exclude_patterns,
            delay=float(delay),
            interval=float(interval),
            restart_on_change=bool(restart),
        )
    except (PatternError, ValueError, TypeError) as e:
        raise ConfigError(str(e)) from e


def _check_types(table: dict, path: Path) -> None:
    """Reject values TOML parsed fine but that have the wrong type."""
    for key in ("roots", "patterns", "exclude_patterns"):
        value = table.get(key)
        if value is not None and not (isinstance(value, list) and all(isinstance(v, str) for v in value)):
            raise ConfigError(f"'{key}' in {path} must be a list of strings, got {value!r}")

    for key in ("delay", "interval"):
        value = table.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ConfigError(f"'{key}' in {path} must be a number of seconds, got {value!r}")

    if "restart" in table and not isinstance(table["restart"], bool):
        raise ConfigError(f"'restart' in {path} must be true or false, got {table['restart']!r}")

    command = table.get("command")
    if command is not None and not (
        isinstance(command, str) or (isinstance(command, list) and all(isinstance(v, str) for v in command))
    ):
        raise ConfigError(f"'command' in {path} must be a string or a list of strings, got {command!r}")


def read_watch_table(path: str | Path) -> dict:
    """Load the raw ``[watch]`` table of a TOML config file.

    Relative roots are resolved against the config file's directory.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file is not valid TOML or a value has the wrong type
    """
    path = Path(path)

    # Check file exists with helpful error
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}\nRun 'fwatcher --init' to create a default config.")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    table = raw.get("watch", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[watch] in {path} must be a table")

    unknown = set(table) - {"roots", "patterns", "exclude_patterns", "delay", "interval", "restart", "command"}
    if unknown:
        logger.warning(f"Ignoring unknown [watch] keys in {path}: {', '.join(sorted(unknown))}")

    _check_types(table, path)

    if "roots" in table:
        table["roots"] = [path.parent / Path(root) for root in table["roots"]]
    return table


def load_watch_config(path: str | Path) -> WatchConfig:
    """Load a WatchConfig running ``command`` from a TOML file.

    Args:
        path: Path to TOML config file

    Returns:
        Validated WatchConfig bound to a ProcessAction
    """
    path = Path(path)
    table = read_watch_table(path)
    argv = parse_command(table.get("command"))
    if not argv:
        raise ConfigError(f"No command configured in {path}")

    return build_watch_config(
        action=ProcessAction(argv),
        roots=table.get("roots", ()),
        patterns=table.get("patterns", ()),
        exclude_patterns=table.get("exclude_patterns", ()),
        delay=table.get("delay", DEFAULT_DELAY),
        interval=table.get("interval", DEFAULT_INTERVAL),
        restart=table.get("restart", False),
    )
