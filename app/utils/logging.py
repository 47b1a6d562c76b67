import logging
import logging.config

from app.config import settings

_configured = False


def build_logging_config() -> dict:
    """Build the dictConfig for the application from settings"""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": settings.LOG_FILE,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": settings.LOG_FORMAT,
                "datefmt": settings.LOG_DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": settings.LOG_LEVEL,
        },
        "loggers": {
            "pymongo": {"level": "WARNING"},
            "motor": {"level": "WARNING"},
        },
    }


def setup_logging():
    global _configured
    if _configured:
        return
    logging.config.dictConfig(build_logging_config())
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring logging on first use"""
    setup_logging()
    return logging.getLogger(name)
