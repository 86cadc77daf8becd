import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str = "INFO") -> None:
    """Install one console handler on the `backend` logger. Safe to call more than once."""
    logger = logging.getLogger("backend")
    logger.setLevel(_parse_level(level))
    if getattr(logger, "_configured", False):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger._configured = True  # type: ignore[attr-defined]
