# core/logging.py
"""
Logging configuration for the backend
"""
import logging
import sys
from typing import Optional

from .config import Settings, get_settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("aiohttp", "httpx", "httpcore", "asyncio")

def setup_logging(settings: Optional[Settings] = None) -> None:
    """Send all logs to stdout; agent loggers follow the configured level"""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    logging.basicConfig(
        level=level,
        format=settings.log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logging.getLogger("agents").setLevel(level)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
