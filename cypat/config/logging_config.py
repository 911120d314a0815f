"""Console logging setup for scripts that embed the engine.

Library modules only ever call ``logging.getLogger(__name__)``; nothing in
``cypat`` configures handlers on import.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_HANDLER_NAME = "cypat-console"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single console handler to the ``cypat`` logger.

    Safe to call repeatedly: the handler is installed once and only the
    level is updated on later calls.
    """
    logger = logging.getLogger("cypat")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logger.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        console = logging.StreamHandler()
        console.set_name(_HANDLER_NAME)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console)

    return logger
