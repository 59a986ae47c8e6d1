"""Logging setup for the mnemo package logger.

Modules log through ``logging.getLogger(__name__)``; this only decides where
``mnemo.*`` records go. What each level carries:

    DEBUG    documents indexed or evicted, links resolved, queue actions dropped
    INFO     batch sync totals, rebuilds, watcher start and stop
    WARNING  unresolved local links, missing memory folder
    ERROR    memory files that failed to index, queued actions that raised

The level comes from MNEMO_LOG_LEVEL (default INFO).
"""

import logging
import os
import sys

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level_name: str | None = None) -> None:
    """Send ``mnemo`` records to stderr. Called once by the CLI.

    Does nothing if the package logger already has a handler.

    Args:
        level_name: Explicit level name. Falls back to MNEMO_LOG_LEVEL, then INFO.
    """
    package_log = logging.getLogger("mnemo")
    if package_log.handlers:
        return

    name = level_name or os.environ.get("MNEMO_LOG_LEVEL", "INFO")
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_log.setLevel(level)
    package_log.addHandler(handler)
    # Records stop at the package logger
    package_log.propagate = False
