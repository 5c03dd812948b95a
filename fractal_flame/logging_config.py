"""Logger setup for the ``fractal_flame`` namespace."""

import logging
import sys
from typing import Optional

# Third-party loggers that are chatty at import time and on device placement.
NOISY_LOGGERS = ("tensorflow", "absl")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the 'fractal_flame' logger for a command-line run.

    Render and tone-mapping workers log from pool threads, so each record
    carries its thread name (``flame-render_0``, ``flame-gamma-log_2``, ...).
    Unless ``level`` is DEBUG, TensorFlow's own loggers are limited to errors.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger("fractal_flame")
    logger.setLevel(level)

    # Repeated calls replace handlers instead of duplicating output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    third_party_level = logging.DEBUG if level <= logging.DEBUG else logging.ERROR
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    logger.debug("Logging initialized.")
    return logger
