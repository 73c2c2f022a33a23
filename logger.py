"""Logging configuration for Spendguard.

All modules log under the "spendguard" logger. setup_logging() attaches a
dated file handler and, unless disabled, a console handler.
"""

import logging
from datetime import date
from typing import Optional

from config import Config

LOGGER_NAME = "spendguard"

_DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CONSOLE_FORMAT = "%(levelname)s - %(message)s"


def setup_logging(config: Config, console: bool = True) -> logging.Logger:
    """Set up application logging.

    Args:
        config: Application configuration containing log settings.
        console: Whether to also log to stderr.

    Returns:
        Configured root application logger.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)

    # setup_logging may run more than once per process (tests, reloads)
    logger.handlers.clear()

    log_file_path = config.log_dir / f"{LOGGER_NAME}-{date.today().isoformat()}.log"
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(config.log_level)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Get the application logger, or a child logger for one component.

    Args:
        component: Optional component name, e.g. "ledger" -> "spendguard.ledger".

    Returns:
        Logger instance.
    """
    if component:
        return logging.getLogger(f"{LOGGER_NAME}.{component}")
    return logging.getLogger(LOGGER_NAME)
