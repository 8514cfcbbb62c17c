"""JSON logging for console and a rotating log file."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "incident_jira_sync"


def setup_logging(level="INFO", log_file=None):
    """
    Attach JSON handlers to the package logger.

    Console logs at `level`; the rotating file (5 MB, 5 backups) always logs
    at DEBUG. Pass an empty log_file to log to the console only.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    console_handler.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5)
        file_handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s [%(levelname)s] %(name)s %(message)s',
                                                           datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
