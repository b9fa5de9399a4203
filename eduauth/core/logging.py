# eduauth/core/logging.py
import logging
import logging.config

from eduauth.core.config import settings

_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_JSON_FORMAT = '{"ts": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

def setup_logging(level: str | None = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    fmt = _JSON_FORMAT if settings.LOG_JSON else _PLAIN_FORMAT
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": fmt},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "eduauth": {"level": level},
            # uvicorn já tem handlers próprios; só alinhamos o nível
            "uvicorn.error": {"level": level},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })
