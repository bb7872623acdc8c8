#!/usr/bin/env python3
"""
Example: Embedded callback
Shows how to use Fwatcher inside an asyncio application with an in-process callback.

This example demonstrates:
- CallbackAction with a coroutine callback
- Running the reaction loop with serve() on an existing event loop
- Stopping the loop from application code
"""

import asyncio
import logging

from fwatcher import CallbackAction, Fwatcher, WatchConfig
from fwatcher_core.notifier import LoggingNotifier


async def on_change(event):
    """Called once at startup (event is None), then for every qualifying change."""
    if event is None:
        print("Initial build")
    else:
        print(f"Rebuilding after {event.kind.label.lower()} of {event.path}")
    await asyncio.sleep(0.5)


async def main():
    config = WatchConfig(
        action=CallbackAction(on_change),
        roots=["."],
        include_patterns=["**/*.md", "**/*.rst"],
        exclude_patterns=["**/_build/**"],
        delay=0.2,
        interval=1.0,
        restart_on_change=True,
    )
    watcher = Fwatcher(config, notifier=LoggingNotifier())

    # Stop after a minute; a real host would call stop() on shutdown
    asyncio.get_running_loop().call_later(60, watcher.stop)
    await watcher.serve()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
