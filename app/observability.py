"""
Logging setup: one console handler on the root logger, level from LOG_LEVEL.
Safe to call more than once (tests build several apps).
"""
import logging
from typing import Optional

from app.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "serviceconnect-console"


def setup_logging(level: Optional[str] = None) -> None:
    level_name = (level or settings.log_level or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(handler)
    logging.getLogger(__name__).debug("Logging configured at %s", level_name)
