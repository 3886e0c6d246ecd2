"""Logging helpers for the mesh toolkit.

All library code obtains loggers through :func:`get_logger`, which places them
under the ``src`` logger family. A single stdout handler is attached to that
family and it does not propagate to the process root logger.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "src"

_FORMAT = logging.Formatter("%(levelname)s %(name)s: %(message)s")


def _ensure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(not isinstance(h, logging.NullHandler) for h in root.handlers):
        for h in list(root.handlers):
            root.removeHandler(h)
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_FORMAT)
        root.addHandler(handler)
    root.propagate = False
    return root


def _to_level(level: Union[str, int, None], default: int = logging.INFO) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    return value if isinstance(value, int) else default


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Set the level of the whole ``src`` logger family."""
    _ensure_root().setLevel(_to_level(level))


def get_logger(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Return a logger under the ``src`` namespace.

    Without an explicit level the logger inherits from the family root set by
    :func:`configure_logging`.
    """
    _ensure_root()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    log = logging.getLogger(name)
    log.setLevel(_to_level(level) if level is not None else logging.NOTSET)
    return log
