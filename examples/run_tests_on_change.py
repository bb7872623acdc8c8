#!/usr/bin/env python3
"""
Example: Rerun pytest when Python files change
Equivalent to: fwatcher -d src -d tests -p '**/*.py' -P '**/.git/**' --interval 1 pytest -q
"""

from fwatcher import Fwatcher, ProcessAction, WatchConfig
from fwatcher_core.notifier import ConsoleNotifier

if __name__ == "__main__":
    config = WatchConfig(
        action=ProcessAction(["pytest", "-q"]),
        roots=["src", "tests"],
        include_patterns=["**/*.py"],
        exclude_patterns=["**/.git/**", "**/__pycache__/**"],
        interval=1.0,
        restart_on_change=False,
    )
    try:
        Fwatcher(config, notifier=ConsoleNotifier()).run()
    except KeyboardInterrupt:
        pass
