"""JSON logging for Cloud Run.

Records go to stdout as JSON objects whose ``severity`` and ``timestamp``
keys Cloud Logging picks up directly. Applied once from the app lifespan.
"""

import logging.config

SERVICE_NAME = "wiki-responder"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s"


def build_logging_config(level: str = "INFO") -> dict:
    """Return a ``dictConfig`` schema routing the root logger to JSON on stdout."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": LOG_FORMAT,
                "rename_fields": {
                    "asctime": "timestamp",
                    "levelname": "severity",
                    "name": "logger",
                },
                "static_fields": {"service": SERVICE_NAME},
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": level.upper(), "handlers": ["stdout"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the JSON logging configuration to the root logger.

    Call once at application startup (the FastAPI lifespan does). ``level``
    is normally ``Settings.log_level``; it is upper-cased before use.
    """
    logging.config.dictConfig(build_logging_config(level))
