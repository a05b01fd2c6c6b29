from __future__ import annotations

import sys

from loguru import logger

_LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {name}:{line} - {message}"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Swap loguru's default sink for one at ``level``. Later calls are ignored."""
    global _configured
    if _configured:
        return
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_LOG_FORMAT)
    _configured = True
