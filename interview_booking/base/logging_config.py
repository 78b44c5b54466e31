import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from pythonjsonlogger import jsonlogger

from interview_booking.base.config import settings


def get_formatter(use_json: bool, service: str) -> logging.Formatter:
    if use_json:
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level"},
            static_fields={"service": service, "environment": settings.ENVIRONMENT},
        )
    return logging.Formatter(
        fmt=f"%(asctime)s | %(levelname)s | %(name)s | [svc={service}] | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: int = settings.LOG_LEVEL_NUMERIC,
    use_json: bool = settings.ENABLE_JSON_LOGS,
    service: str = settings.SERVICE_NAME
) -> logging.Logger:
    """
    Sets up a logger with rotating file + stream handler
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False  # Avoid double logging in root

    # Clear old handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = get_formatter(use_json, service)

    # === Stream Handler (STDOUT) ===
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    # === File Handler (Rotating) ===
    if log_file:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_path = settings.LOG_DIR / log_file
        file_handler = RotatingFileHandler(str(file_path), maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# === Preconfigured loggers ===
app_logger = setup_logger("app", log_file="app.log")
booking_logger = setup_logger("booking", log_file="booking.log")
storage_logger = setup_logger("storage", log_file="storage.log")
error_logger = setup_logger("error_handler", log_file="errors.log")
