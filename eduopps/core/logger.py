"""
Logger setup - loguru configuration for the API process.

Console output is always on; a rotating file sink is added when
LOG_DIR is configured.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from eduopps.core.config import get_settings

_configured = False


def setup_logger(log_dir: Optional[str] = None, level: Optional[str] = None) -> Optional[Path]:
    """
    Configure loguru sinks once per process.

    Args:
        log_dir: Directory for the api.log file (None = console only)
        level: Minimum console level (defaults to settings.log_level)

    Returns:
        Path to log file, or None when logging to console only
    """
    global _configured
    settings = get_settings()
    level = level or settings.log_level
    log_dir = log_dir or settings.log_dir

    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | {name}:{line} | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    log_file = None
    if log_dir:
        path = Path(log_dir)
        path.mkdir(exist_ok=True, parents=True)
        log_file = path / "api.log"
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB",
            retention=5,
        )

    _configured = True
    logger.info(f"Logging configured (level={level}, file={log_file or 'none'})")
    return log_file


def is_configured() -> bool:
    return _configured
