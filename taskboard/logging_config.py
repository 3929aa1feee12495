"""Logging setup."""

import logging
import sys


def setup_logging(level: int | str = logging.INFO) -> None:
    """Install a single stdout handler on the root logger."""
    logger = logging.getLogger()
    if logger.handlers:
        return  # already configured
    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    logger.addHandler(handler)
