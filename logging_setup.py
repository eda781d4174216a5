import logging
import sys


def setup_logging(level: str = "INFO", stream=None):
    logger = logging.getLogger()
    if logger.handlers:  # don't double add during reload
        return
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    h = logging.StreamHandler(stream or sys.stdout)
    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s :: %(message)s"
    )
    h.setFormatter(fmt)
    logger.addHandler(h)
