from __future__ import annotations

import logging
import sys

LOGGER_NAME = "saftools"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the package logger once; later calls only adjust level and stream."""
    logger = logging.getLogger(LOGGER_NAME)
    handler = next((h for h in logger.handlers if getattr(h, "_saftools", False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[saftools] %(message)s"))
        handler._saftools = True
        logger.addHandler(handler)
    else:
        # not setStream(): the previous stream may already be closed
        handler.stream = sys.stderr
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
