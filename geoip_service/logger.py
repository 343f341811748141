from logging import DEBUG, ERROR, INFO, WARNING, config, getLevelName, getLogger
from typing import Any

LOGGER_NAME = "geoip_service"

_LEVELS = {
    "debug": DEBUG,
    "info": INFO,
    "warn": WARNING,
    "error": ERROR,
}


def resolve_log_level(level: str | None) -> str:
    """Map a LOG_LEVEL value (debug/info/warn/error) to a logging level name."""
    return getLevelName(_LEVELS.get(str(level or "").lower(), INFO))


def build_log_config(level: str | None = "info") -> dict[str, Any]:
    """Build the dictConfig used by both the application and uvicorn."""
    log_level = resolve_log_level(level)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s %(asctime)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "use_colors": False,
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["default"], "level": log_level, "propagate": False},
            "uvicorn": {"handlers": ["default"], "level": log_level, "propagate": False},
            "uvicorn.error": {"level": log_level, "propagate": True},
            "grpc": {"handlers": ["default"], "level": log_level, "propagate": False},
        },
    }


def setup_logging(level: str | None = "info") -> dict[str, Any]:
    """Apply the logging configuration and return it so uvicorn can reuse it."""
    log_config = build_log_config(level)
    config.dictConfig(log_config)
    return log_config


logger = getLogger(LOGGER_NAME)
