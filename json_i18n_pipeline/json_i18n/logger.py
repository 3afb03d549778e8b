import logging
import sys

LOGGER_NAME = "json-i18n"

def setup_logger(level: str = "INFO", stream=None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return logger
    # stdout stays free for piping translated JSON in the future
    h = logging.StreamHandler(stream or sys.stderr)
    fmt = logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    h.setFormatter(fmt)
    logger.addHandler(h)
    return logger

def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)
