"""Application-wide logging setup.

All modules log through children of a single named logger so the level and
handlers can be configured once at startup.
"""

import logging
import sys

LOG_NAME = "pausal"
LOG_FORMAT = "%(asctime)s [%(levelname)s] - (%(name)s).%(funcName)s(%(lineno)d) - %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a child of the application logger, e.g. ``pausal.nbs_rates``."""
    return logging.getLogger(LOG_NAME).getChild(name)


def configure_logging(level: str = "INFO") -> logging.Logger:
    global _configured
    root = logging.getLogger(LOG_NAME)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not _configured:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        _configured = True
    return root
