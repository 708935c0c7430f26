"""
Logger setup for command-line use. Library modules only create module loggers.
"""

import logging
import os
import sys
from datetime import datetime

LOGGER_NAME = "doc_engine"


def setup_logger(log_dir: str = "", level: str = "INFO") -> logging.Logger:
    """Configure the package logger.

    Warnings and above go to stderr at any level.  When *log_dir* is set,
    a timestamped file captures everything at *level*.  Calling again
    replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    logger.setLevel(numeric)

    for handler in list(logger.handlers):
        if getattr(handler, "_doc_engine", False):
            logger.removeHandler(handler)
            handler.close()

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(max(numeric, logging.WARNING))
    sh.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    sh._doc_engine = True
    logger.addHandler(sh)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"docengine_{timestamp}.log")

        # File handler captures everything at the configured level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(numeric)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
        ))
        fh._doc_engine = True
        logger.addHandler(fh)

    return logger
