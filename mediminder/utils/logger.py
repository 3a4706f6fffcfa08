# mediminder/utils/logger.py
import logging
import sys
from mediminder.utils.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_logger(name: str = "mediminder") -> logging.Logger:
    """Returns the app logger with exactly one stdout handler; safe to call again on reload."""
    app_logger = logging.getLogger(name)
    app_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    app_logger.handlers.clear()

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(stream)
    # Records stop here so uvicorn's root handlers don't print them twice.
    app_logger.propagate = False
    return app_logger


logger = build_logger()
