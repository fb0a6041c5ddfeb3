"""Logging setup for runnable entry points."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """
    Configure root logging once for a process.

    Library modules only create module loggers; handlers are attached here.
    """
    effective = "DEBUG" if debug else level.upper()
    logging.basicConfig(level=effective, format=LOG_FORMAT, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if debug else logging.WARNING
        )
