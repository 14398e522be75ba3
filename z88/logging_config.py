"""
Logging setup for the Z-88 engine.

All modules log under the ``z88`` namespace::

    from z88.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info(f"[execute] Starting ritual {ritual_id}")
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_CONFIGURED = False


def setup_logging(level: str = None) -> None:
    """Attach a stream handler to the ``z88`` logger once."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger("z88")
    root.setLevel((level or os.getenv("Z88_LOG_LEVEL", "INFO")).upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def get_logger(name: str = "z88") -> logging.Logger:
    """Return a logger under the ``z88`` namespace."""
    if name.startswith("z88"):
        return logging.getLogger(name)
    return logging.getLogger(f"z88.{name}")
