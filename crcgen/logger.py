import logging
import sys
from typing import Optional

LOGGER_NAME = 'crcgen'
LOG_FORMAT = '[%(levelname)s] %(asctime)s %(name)s: %(message)s'
DATE_FORMAT = '%d:%m:%y::%I:%M:%S %p'

_handler: Optional[logging.Handler] = None


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger.

    The handler installed by a previous call is replaced.

    Parameters
    ----------
    level : str, default='INFO'
        Logging level name.
    log_file : str, optional
        Log to this file instead of stderr.

    Returns
    -------
    logging.Logger
        Package logger.
    """
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler.close()
    if log_file:
        _handler = logging.FileHandler(log_file, encoding='utf-8')
    else:
        _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(level.upper())
    return logger
