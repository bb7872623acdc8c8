"""CLI entry point for fwatcher: run a command whenever matching files change."""

import argparse
import logging
import sys
from pathlib import Path

from fwatcher import __version__
from fwatcher.controller import Fwatcher
from fwatcher_core.actions import ProcessAction
from fwatcher_core.config import (
    DEFAULT_DELAY,
    DEFAULT_INTERVAL,
    ConfigError,
    build_watch_config,
    create_default_config,
    parse_command,
    read_watch_table,
)
from fwatcher_core.models import WatchConfig
from fwatcher_core.notifier import ConsoleNotifier
from fwatcher_core.watchers import WatchSourceError

DEFAULT_CONFIG_NAME = "fwatcher.toml"

# Used when neither the command line nor the config file has a patterns entry
DEFAULT_PATTERNS = ["*"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Custom argument list (mainly for testing); defaults to sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="fwatcher",
        description="Run a command whenever files matching a pattern change.",
        epilog="Examples:\n"
        "  fwatcher -p '**/*.py' pytest              # Rerun tests on Python changes\n"
        "  fwatcher -d src -r -- python -m app       # Restart a server on change\n"
        "  fwatcher -c fwatcher.toml                 # Use a config file\n"
        "  fwatcher --init                           # Create fwatcher.toml\n\n"
        "Each run on a change is announced as '<Kind>: <path>', where Kind is\n"
        "Created, Modified, Removed or Renamed.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run, with its arguments",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a TOML config file with a [watch] table",
    )

    parser.add_argument(
        "--init",
        action="store_true",
        help=f"Create a default config file (default: {DEFAULT_CONFIG_NAME}) and exit",
    )

    parser.add_argument(
        "-d",
        "--dir",
        dest="dirs",
        action="append",
        metavar="DIR",
        help="Directory to watch recursively; repeatable (default: current directory)",
    )

    parser.add_argument(
        "-p",
        "--pattern",
        dest="patterns",
        action="append",
        metavar="PATTERN",
        help="Glob a changed path must match; repeatable (default: '*')",
    )

    parser.add_argument(
        "-P",
        "--exclude-pattern",
        dest="exclude_patterns",
        action="append",
        metavar="PATTERN",
        help="Glob that disqualifies a changed path; repeatable",
    )

    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        metavar="SEC",
        help=f"Coalescing window for file events (default: {DEFAULT_DELAY})",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        metavar="SEC",
        help=f"Minimum time between two runs (default: {DEFAULT_INTERVAL})",
    )

    parser.add_argument(
        "-r",
        "--restart",
        action="store_const",
        const=True,
        default=None,
        help="Kill the running command before starting it again",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity; repeat for more detail",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)
    if args.command and args.command[0] == "--":
        args.command = args.command[1:]
    return args


def resolve_config(args: argparse.Namespace) -> WatchConfig:
    """
    Merge command-line arguments over the optional config file.

    Raises:
        ConfigError: If no command is given or a value is invalid
        FileNotFoundError: If the config file does not exist
    """
    table = read_watch_table(args.config) if args.config else {}

    argv = args.command or parse_command(table.get("command"))
    if not argv:
        raise ConfigError("No command given")

    return build_watch_config(
        action=ProcessAction(argv),
        roots=args.dirs or table.get("roots", ()),
        patterns=args.patterns or table.get("patterns", DEFAULT_PATTERNS),
        exclude_patterns=args.exclude_patterns or table.get("exclude_patterns", ()),
        delay=args.delay if args.delay is not None else table.get("delay", DEFAULT_DELAY),
        interval=args.interval if args.interval is not None else table.get("interval", DEFAULT_INTERVAL),
        restart=args.restart if args.restart is not None else table.get("restart", False),
    )


def configure_logging(verbose: int) -> None:
    """Send log records to stderr; -v shows info, -vv debug."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("fwatcher").setLevel(level)
    logging.getLogger("fwatcher_core").setLevel(level)


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the fwatcher CLI.

    Handles:
    - Argument parsing
    - Creation of a default config with --init
    - Launching the reaction loop
    - Error handling and exit codes
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.init:
            config_path = Path(args.config or DEFAULT_CONFIG_NAME).resolve()
            if create_default_config(config_path):
                print(f"Created default config at: {config_path}")
            else:
                print(f"Config already exists: {config_path}")
            return

        config = resolve_config(args)
        watcher = Fwatcher(config, notifier=ConsoleNotifier())
        watcher.run()

    except KeyboardInterrupt:
        # Gracefully handle Ctrl+C
        sys.exit(130)
    except WatchSourceError:
        # Already reported by the reaction loop
        sys.exit(1)
    except (ConfigError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
