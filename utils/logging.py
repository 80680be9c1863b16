"""Logging configuration for ani-shelf using loguru.

Provides centralized logging setup with file rotation (max 10MB per file).
Use get_logger() to get a logger instance for any module.
"""

import sys

from loguru import logger as _base_logger

from models.config import get_data_path

# Store configuration state to prevent re-initialization
_initialized = False


def configure_logging(debug: bool = False) -> None:
    """Configure loguru for the entire application.

    Args:
        debug: If True, set console logging to DEBUG level instead of WARNING
    """
    global _initialized

    if _initialized and not debug:
        return

    # Remove default handler (and ours, when re-configuring for --debug)
    _base_logger.remove()
    _base_logger.configure(extra={"name": "ani-shelf"})

    console_level = "DEBUG" if debug else "WARNING"
    _base_logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=console_level,
    )

    log_dir = get_data_path()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Read-only home: console logging only
        log_dir = None

    # File handler with rotation (10MB per file, keep last 5 files)
    if log_dir is not None:
        _base_logger.add(
            log_dir / "ani-shelf.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            compression="zip",
        )

    _initialized = True


def get_logger(name: str):
    """Get a logger instance bound to a module name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Loguru logger with ``name`` bound into its extra dict
    """
    return _base_logger.bind(name=name)
