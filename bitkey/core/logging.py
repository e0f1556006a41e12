"""
Logger factory for BitKey modules

Environment:
    BITKEY_LOG_LEVEL    level name used when none is passed (default WARNING)
    BITKEY_LOG_FILE     path of a log file shared by every module logger
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

__all__ = ["get_logger"]

LEVEL_VAR = "BITKEY_LOG_LEVEL"
FILE_VAR = "BITKEY_LOG_FILE"
DEFAULT_FORMAT = '%(asctime)s [%(name)s] [%(levelname)s]: %(message)s'


def get_logger(name: str, log_level: Optional[str] = None, log_file: Optional[Path] = None,
               format_string: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with the specified configuration.

    Args:
        name: Logger name (typically __name__ from calling module)
        log_level: Logging level name. Falls back to BITKEY_LOG_LEVEL, then WARNING
        log_file: Optional path for persistent logging. Falls back to BITKEY_LOG_FILE
        format_string: Optional custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Handlers are attached once per name
    if logger.handlers:
        return logger

    level_name = (log_level or os.environ.get(LEVEL_VAR, "WARNING")).upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
    logger.propagate = False

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(stream=sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or (Path(os.environ[FILE_VAR]) if os.environ.get(FILE_VAR) else None)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
