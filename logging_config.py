"""Logging setup shared by the API, the portal tools and the socket demo."""

import logging
import sys

import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every request or packet at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "engineio.server", "socketio.server")


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging to stdout.

    Args:
        level: Logging level name; falls back to ``settings.LOG_LEVEL``
    """
    level_name = (level or config.settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Long-poll requests would flood the access log outside development
    if not config.settings.is_development:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
