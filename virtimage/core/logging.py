import logging
from logging.config import dictConfig
from typing import Optional

from .config import LOG_LEVEL, APP_NAME

# Chatty at DEBUG during streamed image downloads.
_QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool")


def setup_logging(level: Optional[str] = None):
    level = (level or LOG_LEVEL).upper()
    loggers = {
        "": {"handlers": ["console"], "level": level},
        "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
        "uvicorn.error": {"handlers": ["console"], "level": level, "propagate": False},
        "uvicorn.access": {"handlers": ["console"], "level": level, "propagate": False},
        # Package loggers propagate to the root console handler.
        APP_NAME: {"level": level},
    }
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s %(name)s - %(message)s"
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": loggers,
    })
    logging.getLogger(APP_NAME).info("Logging initialized at level %s", level)
