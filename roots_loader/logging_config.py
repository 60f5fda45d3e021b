"""Logging configuration for the loader."""

from __future__ import annotations

import logging
import os
from datetime import datetime

from .config import LoaderConfig

LOGGER_NAME = "roots_loader"


def build_log_file_path(log_dir: str) -> str:
    return os.path.join(log_dir, f"roots_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.log")


def setup_logging(config: LoaderConfig, log_file: str | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(console_handler)

    warnings_logger = logging.getLogger("py.warnings")
    for handler in list(warnings_logger.handlers):
        warnings_logger.removeHandler(handler)

    if not config.log_dir:
        return logger

    os.makedirs(config.log_dir, exist_ok=True)
    file_handler = logging.FileHandler(
        log_file or build_log_file_path(config.log_dir), encoding="utf-8"
    )
    file_handler.setLevel(config.file_log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | "
            "%(funcName)s | %(message)s"
        )
    )
    logger.addHandler(file_handler)

    logging.captureWarnings(True)
    warnings_logger.setLevel(logging.DEBUG)
    warnings_logger.propagate = False
    warnings_logger.addHandler(file_handler)
    return logger
