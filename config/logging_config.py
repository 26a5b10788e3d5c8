"""
Logging setup for the Sharpmarks gradebook.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "sharpmarks-console"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the root logger."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
