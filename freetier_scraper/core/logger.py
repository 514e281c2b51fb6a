"""
Logging configuration for the scraper

One log file per run, named after the package logger and the run start time
(``freetier_scraper_20251019_060000.log``), always at DEBUG. The console shows
the per-provider ✓ / ⚠️ / ✗ / 🔄 lines at the configured level.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def log_file_path(name: str, log_dir: str, started: Optional[datetime] = None) -> Path:
    """Per-run log file for the given logger name"""
    started = started or datetime.now()
    prefix = name.split('.')[0]
    return Path(log_dir) / f"{prefix}_{started.strftime('%Y%m%d_%H%M%S')}.log"

def _file_handler(path: Path) -> logging.Handler:
    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler

def _console_handler(log_level: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler

def setup_logger(name: str = "freetier_scraper", log_level: str = "INFO",
                 log_dir: str = "logs") -> logging.Logger:
    """Attach the run's file and console handlers to the package logger, once"""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # A second call in the same process keeps the first run's handlers
    if logger.handlers:
        return logger

    path = log_file_path(name, log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.addHandler(_file_handler(path))
    logger.addHandler(_console_handler(log_level))

    return logger
