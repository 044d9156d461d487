import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Sequence

# module loggers (logging.getLogger(__name__)) under these packages share the API log
APP_PACKAGES = ("routes", "services", "realtime", "utils")


def setup_api_logger(log_path: Optional[str] = None, packages: Sequence[str] = APP_PACKAGES) -> logging.Logger:
    """Setup and return an application-wide logger for API errors.

    Creates a rotating file handler at `log_path` (defaults to ./logs/api.log)
    and mirrors records to stderr. The same handlers are attached to the
    loggers of `packages`.
    """
    if not log_path:
        base = os.path.abspath(os.path.dirname(__file__))
        logs_dir = os.path.join(base, '..', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_path = os.path.join(logs_dir, 'api.log')
    else:
        os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)

    logger = logging.getLogger('hopalong.api')
    logger.setLevel(logging.INFO)

    # avoid adding multiple handlers if called multiple times
    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

        handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

        for name in packages:
            package_logger = logging.getLogger(name)
            package_logger.setLevel(logging.INFO)
            for h in logger.handlers:
                package_logger.addHandler(h)

    return logger
