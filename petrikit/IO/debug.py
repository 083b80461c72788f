from __future__ import annotations

import logging
from typing import Optional, Union

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = "INFO",
    log_filename: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger for scripts and notebooks.

    Library modules only create loggers with ``logging.getLogger(__name__)``;
    handlers are installed here, on demand, by the application.

    :param level: Logging level name (``"DEBUG"``, ``"INFO"``, ...) or number.
    :type level: Union[int, str]
    :param log_filename: Optional file to write to. If ``None`` records go to
        stderr.
    :type log_filename: Optional[str]
    :returns: The ``petrikit`` package logger.
    :rtype: logging.Logger
    :raises ValueError: If ``level`` is not a known level name.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Invalid log level: {level!r}")
        level = numeric

    handlers = []
    if log_filename:
        handlers.append(logging.FileHandler(log_filename, mode="w"))
    else:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(level=level, format=_FORMAT, handlers=handlers, force=True)
    logger = logging.getLogger("petrikit")
    logger.setLevel(level)
    return logger
