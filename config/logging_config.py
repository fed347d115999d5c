"""
Logging configuration for the nextboard display engine.
Sets up console and file handlers with appropriate formatting.
"""

import logging
import logging.handlers
import colorlog
from config.settings import LOGS_DIR, DEBUG_MODE

ROOT_LOGGER_NAME = "nextboard"


def setup_logging(name: str = ROOT_LOGGER_NAME, level: int = None) -> logging.Logger:
    """
    Configure and return a logger with console and file handlers.

    Args:
        name: Logger name (typically the project root logger)
        level: Logging level (defaults based on DEBUG_MODE)

    Returns:
        Configured logger instance
    """
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers if called multiple times
    if logger.handlers:
        return logger

    # Console handler with colors
    console_handler = colorlog.StreamHandler()
    console_handler.setLevel(level)
    console_formatter = colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler with rotation
    log_file = LOGS_DIR / "nextboard.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Silence noisy third-party libraries
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger


def set_level(level) -> None:
    """
    Change the level of the project logger and its handlers.

    Args:
        level: Logging level name or number
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        if not isinstance(handler, logging.handlers.RotatingFileHandler):
            handler.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance. If root logger not configured, configure it first.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    # Configure root logger if not already done
    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        setup_logging(ROOT_LOGGER_NAME)

    return logging.getLogger(name)
