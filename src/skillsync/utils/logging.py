"""Logging configuration for skillsync."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from skillsync.utils.config import Config

LOGGER_NAME = "skillsync"
LOG_FILENAME = "skillsync.log"


def setup_logging(config: Config, console_output: bool = False) -> None:
    """
    Route skillsync logs to the workspace log file.

    Calling this again replaces the handlers from the previous call, so each
    CLI invocation logs to its own workspace.

    Args:
        config: Application configuration
        console_output: Also print INFO and above to stdout (--verbose)
    """
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    # No timestamp on the console
    console_formatter = logging.Formatter("%(levelname)s - %(name)s - %(message)s")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    config.logging_path.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.logging_path / LOG_FILENAME, maxBytes=100000, backupCount=3
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)
