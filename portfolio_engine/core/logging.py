"""
Engine logging setup.

Every module logs through logging.getLogger(__name__); setup_logging is
called once by PortfolioSession to attach the stdout handler.
"""

import logging
import sys
from typing import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Market data and scheduler libraries log every request / job run at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "yfinance", "apscheduler")


def resolve_level(level: str) -> int:
    """Map a LOG_LEVEL name to a logging level; unknown names mean INFO."""
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO", quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """
    Configure engine logging on stdout.

    Third-party loggers in `quiet` are held at WARNING unless the engine
    itself runs at DEBUG.
    """
    resolved = resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("portfolio_engine").setLevel(resolved)
    for name in quiet:
        logging.getLogger(name).setLevel(resolved if resolved <= logging.DEBUG else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
