import logging
import sys
from typing import TextIO

_LOGGING_CONFIGURED = False


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """Configure logging to output to stdout (or ``stream``) with proper formatting."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603

    if _LOGGING_CONFIGURED:
        return
    root_logger = logging.getLogger()
    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Set lower log levels for some noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    _LOGGING_CONFIGURED = True
