"""
Central logging setup: console logging plus an optional rotating log file.
"""

import logging
from logging.handlers import RotatingFileHandler

from .config import ShellConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(cfg: ShellConfig) -> None:
    level = getattr(logging, cfg.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if cfg.log_file:
        handler = RotatingFileHandler(
            cfg.log_file,
            maxBytes=cfg.log_rotate_bytes,
            backupCount=cfg.log_rotate_keep,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)

    # Pillow logs every plugin probe at DEBUG
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
