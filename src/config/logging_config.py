"""
Logging setup - stdlib logging configured once at startup.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as "INFO" or "debug"
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())
    # Request lines from httpx would repeat every store call
    logging.getLogger("httpx").setLevel(logging.WARNING)
