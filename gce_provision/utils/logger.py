"""
GCE Provision - Logging Setup

Console output for operators, optional file output for CI artifacts.

Levels:
- INFO (default): one line per provisioning step
- DEBUG (--verbosity=debug): API calls, poll attempts, stage changes
- WARNING: resources left behind after a failure
- ERROR: the reason a run stopped
"""

import logging
import sys
from pathlib import Path

LOGGER_NAME = 'gce_provision'

# Chatty below WARNING, even in debug runs
NOISY_LOGGERS = ('googleapiclient.discovery', 'googleapiclient.discovery_cache', 'urllib3')

DEBUG_FORMAT = '[%(asctime)s] %(levelname)s [%(funcName)s:%(lineno)d]: %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class CleanFormatter(logging.Formatter):
    """
    Operator-facing console format.

    INFO lines are printed as-is; every other level gets a short marker.
    """

    PREFIXES = {
        logging.DEBUG: '[DEBUG] ',
        logging.WARNING: '[!]  WARNING: ',
        logging.ERROR: '[X] ERROR: ',
        logging.CRITICAL: '[!!] CRITICAL: ',
    }

    def format(self, record):
        return self.PREFIXES.get(record.levelno, '') + record.getMessage()


def _console_handler(level: int, debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if debug:
        handler.setFormatter(logging.Formatter(DEBUG_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(CleanFormatter())
    return handler


def _file_handler(log_file, level: int) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level='INFO', log_file=None, debug=False):
    """
    Configure the gce_provision logger.

    Calling this again replaces the previous handlers, so create and
    destroy can each set up logging in the same process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives a detailed copy of the log
        debug: Force DEBUG level and a detailed console format

    Returns:
        logging.Logger: The configured logger

    Example:
        logger = setup_logging('INFO', log_file='.kitchen/logs/gce.log')
        logger.info("Creating instance...")
    """
    numeric_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(_console_handler(numeric_level, debug))

    if log_file:
        logger.addHandler(_file_handler(log_file, numeric_level))
        logger.debug(f"Logging to file: {log_file}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


# Debug logging helpers; all accept logger=None

def log_api_call(logger, method_name: str, **params):
    """
    Log a Compute Engine API call (DEBUG level).

    Example:
        log_api_call(logger, 'disks.insert', project='my-project', zone='us-central1-a')
        # API call: disks.insert(project=my-project, zone=us-central1-a)
    """
    if logger:
        args = ', '.join(f'{key}={value}' for key, value in params.items())
        logger.debug(f"API call: {method_name}({args})")


def log_state_change(logger, resource: str, old_state: str, new_state: str):
    """
    Log a lifecycle stage change (DEBUG level).

    Example:
        log_state_change(logger, 'instance', 'CREATING', 'WAITING_READY')
        # State change: instance: CREATING -> WAITING_READY
    """
    if logger:
        logger.debug(f"State change: {resource}: {old_state} -> {new_state}")


def print_header(logger, title: str, char='=', length=60):
    """Log a title between two rules (INFO level)."""
    rule = char * length
    for line in (rule, title, rule):
        logger.info(line)
