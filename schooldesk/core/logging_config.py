# schooldesk/core/logging_config.py - Logging setup driven by settings
import logging
import logging.handlers
from typing import Optional

from schooldesk.core.config import Settings, settings as default_settings

FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging(current: Optional[Settings] = None) -> None:
    """Configure the root logger once at startup"""
    current = current or default_settings
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if current.LOG_FILE_PATH:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                current.LOG_FILE_PATH,
                maxBytes=current.LOG_MAX_SIZE,
                backupCount=current.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, current.LOG_LEVEL),
        format=FORMATS[current.LOG_FORMAT],
        handlers=handlers,
        force=True,
    )

    # SQLAlchemy is noisy at INFO unless explicitly asked for
    if not (current.DATABASE_ECHO or current.DEV_LOG_SQL):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
