import logging
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure root logging for a host process

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The SDK package logger
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )
    return get_logger()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the SDK namespace"""
    if name:
        return logging.getLogger(f"zammad_sdk.{name}")
    return logging.getLogger("zammad_sdk")
