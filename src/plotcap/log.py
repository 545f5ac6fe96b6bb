"""Logging setup for the command line tool."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(name: str = "plotcap",
                 level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """Configure ``name`` with a console handler and, optionally, a file handler.

    Repeated calls update the level of existing handlers. A ``log_file`` not
    yet attached to the logger gets its own handler, so later calls can add
    files but never duplicate one.
    """

    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handlers = [handler for handler in logger.handlers if isinstance(handler, logging.FileHandler)]
    if not any(handler not in file_handlers for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        path = os.path.abspath(log_file)
        if not any(handler.baseFilename == path for handler in file_handlers):
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
