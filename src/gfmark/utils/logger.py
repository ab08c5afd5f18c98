"""Logging helper for gfmark.

Example:
    >>> from gfmark.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("rendering document")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a standard library logger under the "gfmark." namespace.

    Example:
        >>> get_logger("sanitize").name
        'gfmark.sanitize'
    """
    if not (name == "gfmark" or name.startswith("gfmark.")):
        name = f"gfmark.{name}"
    return logging.getLogger(name)
