"""Logging setup for the storefront service."""
import logging
import sys

from storefront.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Safe to call more than once; existing handlers are replaced.
    """
    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # SQL echo is noisy outside of debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
