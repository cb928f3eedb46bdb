import logging
import logging.config
from pathlib import Path

from cyberlearn.core.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "default",
            "stream": "ext://sys.stdout"
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "default",
            "filename": f"{settings.LOG_DIR}/app.log",
            "maxBytes": 10485760,
            "backupCount": 5
        },
        "error_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "default",
            "filename": f"{settings.LOG_DIR}/error.log",
            "maxBytes": 10485760,
            "backupCount": 5
        }
    },
    "root": {
        "level": settings.LOG_LEVEL,
        "handlers": ["console", "file", "error_file"]
    },
    "loggers": {
        "cyberlearn": {
            "level": settings.LOG_LEVEL,
            "handlers": ["console", "file", "error_file"],
            "propagate": False
        },
        "uvicorn.access": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False
        }
    }
}

def configure_logging():
    config = LOGGING_CONFIG
    if settings.LOG_TO_FILE:
        Path(settings.LOG_DIR).mkdir(exist_ok=True)
    else:
        config = {
            **LOGGING_CONFIG,
            "handlers": {"console": LOGGING_CONFIG["handlers"]["console"]},
            "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
            "loggers": {
                name: {**logger_config, "handlers": ["console"]}
                for name, logger_config in LOGGING_CONFIG["loggers"].items()
            },
        }
    logging.config.dictConfig(config)
