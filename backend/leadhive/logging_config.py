"""Application logging setup."""

import logging
import sys
from typing import Optional

from leadhive.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    Later calls only adjust the level so that reloading the app (or
    re-creating it in tests) does not stack handlers.
    """
    global _configured

    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    _configured = True
