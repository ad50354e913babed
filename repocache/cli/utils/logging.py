import logging
import sys


logger = logging.getLogger("repocache")


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.

    Debug output is prefixed with the emitting module.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if debug:
        formatter = logging.Formatter("%(name)s: %(message)s")
    else:
        formatter = logging.Formatter("%(message)s")

    for handler in logger.handlers:
        handler.setFormatter(formatter)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
