"""Logging setup for schedule-copy."""

import logging
import sys
from pathlib import Path
from typing import Optional

APP_LOGGER = "schedule_copy"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# -v count -> level of the application logger
VERBOSITY_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG, TRACE]


def verbosity_to_level(verbose: int) -> int:
    """Map a -v count (0..4) to a logging level."""
    if verbose < 0 or verbose >= len(VERBOSITY_LEVELS):
        raise ValueError(
            f"invalid arg: {len(VERBOSITY_LEVELS) - 1} < {verbose} number of verbose"
        )
    return VERBOSITY_LEVELS[verbose]


def setup_logging(verbose: int = 0, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure console (and optional file) logging.

    Only the application logger follows the verbosity; everything else,
    third-party libraries included, stays at ERROR.

    Args:
        verbose: Number of -v flags given
        log_file: Optional path of a log file

    Returns:
        The application logger
    """
    level = verbosity_to_level(verbose)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.ERROR)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_file_path = Path(log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    return logger
