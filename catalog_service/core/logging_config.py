"""Logging configuration for the application."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from catalog_service.core.config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging() -> logging.Logger:
    """Build the service logger once; repeated calls return the same logger."""
    service_logger = logging.getLogger("catalog_service")
    if service_logger.handlers:
        return service_logger

    level = getattr(logging, LOG_LEVEL, logging.INFO)
    service_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    service_logger.addHandler(console_handler)

    log_dir = Path(LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    service_logger.addHandler(_rotating_handler(log_dir / "app.log", level, formatter))
    # Store and integrity failures are warnings; only real errors land here
    service_logger.addHandler(_rotating_handler(log_dir / "errors.log", logging.ERROR, formatter))

    # Prevent duplicate logs from uvicorn
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return service_logger


logger = configure_logging()
