import logging

from ..config import LOG_FILE, LOG_LEVEL

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="taj_autos", level=None, log_file=None):
    """
    Configure (once) and return the application logger.

    Module loggers created with logging.getLogger(__name__) inside the package
    propagate here, so this only needs to run once at process start.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level or getattr(logging, LOG_LEVEL, logging.INFO))
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(ch)
        path = log_file or LOG_FILE
        if path:
            fh = logging.FileHandler(str(path), mode="a", encoding="utf-8", delay=True)
            fh.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(fh)
    return logger
