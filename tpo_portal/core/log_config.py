"""
Operational logging setup.

Every module logs through ``logging.getLogger(__name__)``; this only wires
handlers and levels once, at application creation.
"""

import logging.config


def configure_logging(level: str = "INFO") -> None:
    """Install a single leveled stream handler for the tpo_portal loggers."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "tpo_portal": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": True,
            },
        },
    })
