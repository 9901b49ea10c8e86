# ============================================================================
# FILE: tagify/core/logging.py
# ============================================================================
import logging
import sys
from tagify.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False

def setup_logging(level: str = None) -> None:
    """Configure the root logger once for the whole application"""
    global _configured
    if _configured:
        return

    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _configured = True
