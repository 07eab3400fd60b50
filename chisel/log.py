from __future__ import annotations

import sys
from typing import Any

from loguru import logger

_PREFIX = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "


def _format(record: dict) -> str:
    # records from outside the engine carry no bound module name
    source = "{extra[module]}" if "module" in record["extra"] else "{name}"
    return _PREFIX + "<cyan>" + source + "</cyan> | <level>{message}</level>\n{exception}"


def configure_logging(sink: Any = None, level: str = "INFO") -> int:
    """Attach a loguru sink for engine logs and return its handler id."""
    logger.enable("chisel")
    return logger.add(sink if sink is not None else sys.stderr, level=level, format=_format)


def remove_logging(handler_id: int) -> None:
    try:
        logger.remove(handler_id)
    except ValueError:
        # already removed by the application
        pass


def get_logger(module: str = "engine"):
    return logger.bind(module=module)
