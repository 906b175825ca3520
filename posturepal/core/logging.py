"""
Logging configuration shared by the API server and the tracking client.
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that flood the console at INFO
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "uvicorn.access",
    "urllib3.connectionpool",
    "httpx",
]


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(numeric_level, logging.WARNING))
