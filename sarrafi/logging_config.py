import logging
import os
import sys
from logging import Logger
from logging.handlers import RotatingFileHandler
from typing import Optional


def _has_handler(logger: Logger, cls, filename: Optional[str] = None) -> bool:
    for h in logger.handlers:
        if type(h) is not cls:
            continue
        if filename is None:
            return True
        if getattr(h, 'baseFilename', None) == os.path.abspath(filename):
            return True
    return False


def setup_logging(app=None, log_level: str = 'INFO', logfile: Optional[str] = None) -> Logger:
    """
    Configure root logging to stream to stdout and, when a file is given,
    to a rotating log file.
    Idempotent: safe to call for every app created (tests create many).
    """
    if app is not None:
        log_level = app.config.get('LOG_LEVEL', log_level)
        logfile = app.config.get('LOG_FILE', logfile)

    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)

    fmt = logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s')

    # Console handler (stdout)
    if not _has_handler(logger, logging.StreamHandler):
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    # File handler (rotating)
    if logfile and not _has_handler(logger, RotatingFileHandler, filename=logfile):
        os.makedirs(os.path.dirname(os.path.abspath(logfile)), exist_ok=True)
        fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=3, encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # Make werkzeug (Flask dev server) logs go through root as well
    werk = logging.getLogger('werkzeug')
    werk.setLevel(logging.INFO)
    werk.propagate = True

    return logger
