import logging
import os

STREAM_FORMAT = '[%(name)s] %(levelname)s: %(message)s'


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the package loggers.

    Safe to call more than once; the handler is only installed the first time.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    for name in ("tryon_studio", "api"):
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        if not any(getattr(h, "_tryon_studio", False) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(fmt=STREAM_FORMAT))
            handler._tryon_studio = True
            logger.addHandler(handler)
