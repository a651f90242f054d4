"""Logging configuration."""
import logging
import sys
from typing import Optional

from app.core.config import settings

# HTTP and SDK clients log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "twilio.http_client", "sqlalchemy.engine", "aiosqlite")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging at ``level`` (defaults to LOG_LEVEL)."""
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
