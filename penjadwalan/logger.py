import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
ROOT_LOGGER = "penjadwalan"


def setup_logger(name=ROOT_LOGGER, level=None):
    """
    Return a logger under the 'penjadwalan' namespace.
    The root handler is attached only once, so modules can call this freely at import time.
    Level defaults to PENJADWALAN_LOG_LEVEL (INFO if unset).
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(level or os.environ.get("PENJADWALAN_LOG_LEVEL", "INFO").upper())
    elif level:
        root.setLevel(level)

    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
