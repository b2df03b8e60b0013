"""Logging configuration helpers."""

import logging

# Client libraries that log every outbound request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the diet_planner logger tree.

    Safe to call repeatedly; the handler is only added once, but the level
    is refreshed on every call.
    """
    logger = logging.getLogger("diet_planner")
    logger.setLevel(logging.getLevelName(level.upper()))
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
