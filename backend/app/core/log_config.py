"""Process-wide logging setup."""

import logging

from backend.app.core.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Attach one stream handler to the ``backend`` logger tree (idempotent)."""
    global _configured
    root = logging.getLogger("backend")
    root.setLevel(level or get_settings().log_level)
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
