# app/core/logging.py
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def init_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stdout handler"""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # Access lines come from our own middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
