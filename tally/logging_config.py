"""Logging setup for tally: one stream handler on the ``tally`` logger."""
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "tally-console"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Configure the ``tally`` logger; calling it again only changes the level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level {level!r}")
        level = resolved

    root_logger = logging.getLogger("tally")
    root_logger.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    return root_logger
