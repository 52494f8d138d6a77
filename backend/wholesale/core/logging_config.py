"""
Logging for the ordering service

setup_logging() is called once from the application lifespan and routes
every logger to three places:

- stdout, with colored level names
- <LOG_DIR>/wholesale_<date>.log, INFO and above: order commits, credit
  rejections, payments and status changes
- <LOG_DIR>/wholesale_error_<date>.log, ERROR and above: rollbacks and
  storage failures

Services take their logger from get_logger(__name__).
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from wholesale.core.config import settings

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Colored level names for the console"""

    COLORS = {
        'DEBUG': '\033[36m',     # cyan
        'INFO': '\033[32m',      # green
        'WARNING': '\033[33m',   # yellow
        'ERROR': '\033[31m',     # red
        'CRITICAL': '\033[35m',  # magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(log_level: str = "INFO", log_dir: str = None):
    """
    Configure the root logger

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_dir: directory for the dated log files (defaults to settings.LOG_DIR)
    """
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Drop handlers from a previous setup
    root_logger.handlers.clear()

    # Console (colored)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # One file per day
    today = datetime.now().strftime("%Y-%m-%d")
    file_handler = logging.FileHandler(
        log_path / f"wholesale_{today}.log",
        encoding="utf-8"
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(file_handler)

    # Errors also go to their own file
    error_handler = logging.FileHandler(
        log_path / f"wholesale_error_{today}.log",
        encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(error_handler)

    # Quieter third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.info("📋 Logging initialised")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
