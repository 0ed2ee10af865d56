"""
Idempotent stderr logging setup for the watcher logger tree
"""

import logging
import os
import sys

HANDLER_NAME = 'watcher-stderr'

_CONFIGURED = False


def setup_logging(level=None) -> None:
    """
    Configure watcher logging to stderr. Safe to call multiple times.

    Args:
        level: Logging level (defaults to WATCHER_LOG_LEVEL, then INFO)
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if level is None:
        level = os.environ.get('WATCHER_LOG_LEVEL', 'INFO').upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )

    logger = logging.getLogger('watcher')
    logger.addHandler(handler)
    logger.propagate = False

    try:
        logger.setLevel(level)
    except (ValueError, TypeError):
        logger.setLevel(logging.INFO)
        logger.warning("Unknown log level %r, using INFO", level)

    _CONFIGURED = True
