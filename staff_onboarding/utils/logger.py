"""Logging setup for the staff onboarding service.

One stdout handler on the root logger, shared by the API server and the
CLI. HTTP client libraries used by the Supabase and Anthropic SDKs log
every request at INFO, so they are held at WARNING unless the service
itself runs at DEBUG.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_CHATTY_LIBRARIES = ("httpx", "httpcore", "hpack", "anthropic", "urllib3")


def setup_logging(level: str = "INFO") -> None:
    """Attach the stdout handler to the root logger once.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"INFO"``. Unknown names
            fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
