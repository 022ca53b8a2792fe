"""Console and optional file logging for a report run"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from spillover.config import LOG_DATE_FORMAT, LOG_FILE_TIMESTAMP, LOG_FORMAT, PROGRAM_NAME

PACKAGE_LOGGER = "spillover"


def setup_logging(log_to_file: bool = False, debug: bool = False,
                  log_dir: Path = Path(".")) -> Optional[Path]:
    """
    Configure the package logger

    Args:
        log_to_file: Also write a timestamped log file
        debug: Log at DEBUG instead of INFO
        log_dir: Directory for the log file

    Returns:
        Path to the log file, or None when file logging is off
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if not log_to_file:
        return None

    timestamp = datetime.now().strftime(LOG_FILE_TIMESTAMP)
    log_file = Path(log_dir) / f"{PROGRAM_NAME}-{timestamp}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.info(f"Log file: {log_file}")
    return log_file
