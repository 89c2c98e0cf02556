import logging
from logging.config import dictConfig
from typing import Any, Dict

APP_LOGGER = "catalog_site"

# Loggers that share the console handler through propagation.
ROUTED_LOGGERS = (APP_LOGGER, "uvicorn", "uvicorn.error", "uvicorn.access")

# passlib warns on every start with bcrypt>=4 because the version attribute moved.
QUIET_LOGGERS = {"passlib.handlers.bcrypt": "ERROR"}


def build_logging_config(log_level: str = "INFO") -> Dict[str, Any]:
    level = log_level.upper()
    loggers: Dict[str, Dict[str, Any]] = {name: {"level": level, "propagate": True} for name in ROUTED_LOGGERS}
    loggers.update({name: {"level": quiet_level} for name, quiet_level in QUIET_LOGGERS.items()})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }


def configure_logging(log_level: str = "INFO") -> None:
    """Send application, uvicorn and library records through one console handler."""
    dictConfig(build_logging_config(log_level))
    logging.getLogger(APP_LOGGER).debug("logging_configured", extra={"level": log_level.upper()})
