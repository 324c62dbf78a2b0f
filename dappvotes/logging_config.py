"""Logging setup for scripts and host applications."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(development: bool = False) -> None:
    """Configure root logging. Debug output is only enabled in development."""
    logging.basicConfig(
        level=logging.DEBUG if development else logging.INFO,
        format=LOG_FORMAT,
    )
    # web3 and httpx log every request at debug level
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
