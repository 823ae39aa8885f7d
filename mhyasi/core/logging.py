import logging
import sys

from mhyasi.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install a single stderr handler on the root logger.

    Safe to call more than once; existing handlers are replaced so that
    reloads do not duplicate output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.handlers = [handler]
