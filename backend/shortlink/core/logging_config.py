"""
Logging setup for shortlink.

Every module logs through get_logger(__name__). Nothing is configured at
import time; the entry point calls setup_logging() once. The binding layer
(shortlink.services.binding) can be made chattier or quieter on its own via
BINDING_LOG_LEVEL, e.g. DEBUG to see watcher events and write-backs.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
BINDING_LOG_LEVEL = os.getenv("BINDING_LOG_LEVEL", "").upper() or None

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

# Third-party loggers and the level they are capped at
QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    # aiosqlite logs every proxied call at DEBUG
    "aiosqlite": logging.WARNING,
}


def _level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    enable_file_logging: bool = LOG_TO_FILE,
    binding_log_level: Optional[str] = BINDING_LOG_LEVEL
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Level for the console and the root logger
        log_file: File to log to (defaults to LOG_DIR/shortlink.log)
        enable_file_logging: Also log everything at DEBUG to log_file
        binding_log_level: Separate level for shortlink.services.binding
    """
    numeric_level = _level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    if enable_file_logging:
        path = Path(log_file) if log_file else LOG_DIR / "shortlink.log"
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    if binding_log_level:
        binding_level = _level(binding_log_level, numeric_level)
        logging.getLogger("shortlink.services.binding").setLevel(binding_level)
        # The console handler would otherwise drop binding DEBUG records
        console_handler.setLevel(min(numeric_level, binding_level))


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module (pass __name__)."""
    return logging.getLogger(name)
