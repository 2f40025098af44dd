"""Centralized logging configuration for model construction.

All modules should import logger from here:
    from utils.logging_config import logger
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger("box_atlas")
logger.setLevel(logging.INFO)  # Only INFO and above (no DEBUG spam)

# Prevent duplicate handlers if module is imported multiple times
if not logger.handlers:
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(stream_handler)

    # Optional file log next to the other run artifacts
    if os.getenv("RESULTS_DIR"):
        LOG_DIR = Path(os.environ["RESULTS_DIR"])
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / "model.log", mode="a")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
            )
        )
        logger.addHandler(file_handler)
