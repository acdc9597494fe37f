"""
Logging Configuration
The package itself only attaches a NullHandler (see __init__). Applications
embedding the container call setup_logging() to get console/file output for
the 'dynamicsequence' namespace, and reset_logging() to detach it again.
"""
import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "dynamicsequence"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# marks handlers installed here, so handlers added by the host app survive
_OWNED_ATTR = "_dynamicsequence_owned"


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)]


def _detach(logger: logging.Logger) -> None:
    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configures the logger for the 'dynamicsequence' namespace.

    Repeated calls replace the handlers of the previous call instead of
    stacking them. Handlers not installed by this function are left alone.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        stream: Console stream, stdout when omitted.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    _detach(logger)

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED_ATTR, True)
        logger.addHandler(handler)

    logger.info("Logging initialized.")
    return logger


def reset_logging() -> None:
    """Remove the handlers installed by setup_logging() and restore the default level."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    _detach(logger)
    logger.setLevel(logging.NOTSET)
