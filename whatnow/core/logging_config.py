import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(process)d] - %(message)s"

# chatty third-party loggers, kept at WARNING unless the app runs at DEBUG
_NOISY = ("sqlalchemy.engine", "uvicorn.access", "httpx")


def resolve_level(level: int | str) -> int:
    """Map LOG_LEVEL values ("debug", "WARNING", 20) to a logging level."""
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str = logging.INFO) -> int:
    """
    Configure the root logger for the API process and return the level used.

    When a host (uvicorn, pytest) already installed handlers only the level is
    applied, so their output format is left alone.
    """
    resolved = resolve_level(level)
    root = logging.getLogger()
    root.setLevel(resolved)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    for name in _NOISY:
        logging.getLogger(name).setLevel(resolved if resolved <= logging.DEBUG else logging.WARNING)
    return resolved
