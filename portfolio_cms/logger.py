"""
Centralized logging for portfolio-cms.

Usage:
    from portfolio_cms.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Persisted %d bytes", size)
"""

import logging
import sys

_configured = False


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging. Call once at startup; later calls are no-ops."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module (typically ``__name__``)."""
    return logging.getLogger(name)
