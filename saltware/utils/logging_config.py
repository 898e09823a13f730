"""
Logging setup for the API process.
"""
import logging
import sys
from typing import Union

# Per-request transport chatter; warnings from these still come through
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(component_name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Send every saltware logger to stdout, tagged with the component name.

    `level` may be a name from settings ("debug", "INFO") or a number;
    unknown names fall back to INFO.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=f'[%(asctime)s] [{component_name.upper()}] %(levelname)s %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stdout,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logging.getLogger(component_name)
