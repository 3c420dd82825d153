# estimating/logger.py
import logging
from logging.handlers import RotatingFileHandler
import os

from estimating.config import get_settings


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger  # handlers are attached once per logger

    settings = get_settings()
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
    )

    # console
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # rotating file
    os.makedirs(settings.log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(settings.log_dir, "app.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger
