"""Logging setup shared by scripts."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Our loggers are named after their modules (core.*, services.*)
PACKAGE_LOGGERS = ("core", "services")

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("azure", "httpx", "kiota_http", "msal")


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging to stderr in the shared format."""
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    for logger_name in PACKAGE_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
