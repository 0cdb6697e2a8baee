"""
Logging setup for the calculator app.

Streamlit re-executes the script on every interaction, so setup_logging()
only attaches handlers the first time it is called.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_configured = False


def setup_logging(log_dir: Optional[Union[str, Path]] = None, level: Optional[str] = None):
    """
    Configure the root logger.

    Args:
        log_dir: Directory for app.log. Defaults to config.LOG_DIR.
        level: Level name, defaults to config.LOG_LEVEL.
    """
    global _configured
    if _configured:
        return logging.getLogger()

    log_dir = Path(log_dir or config.LOG_DIR)
    level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Console handler (for development)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # Main application log (daily rotation)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        app_log_handler = logging.handlers.TimedRotatingFileHandler(
            log_dir / 'app.log',
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8',
        )
        app_log_handler.setLevel(level)
        app_log_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(app_log_handler)
    except OSError as e:
        logger.warning("File logging disabled, cannot write to %s: %s", log_dir, e)

    _configured = True
    logger.info("Logging initialised (level=%s)", logging.getLevelName(level))
    return logger
