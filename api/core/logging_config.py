"""
Root logger setup.

Called once from `create_app`. Modules log through
`logging.getLogger(__name__)` and never configure handlers themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: str | None = None) -> None:
    """
    Attach a console handler (and optionally a file handler) to the root
    logger. Does nothing when the root logger is already configured, e.g.
    under uvicorn or when `create_app` runs more than once in tests.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return None

    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
