"""
Loguru configuration for vfpipe.

Run progress and session console output go to stderr. With
``settings.log_to_file`` they are also written to a rotating
``vfpipe.log`` under ``settings.get_log_dir()``. Records that httpx and
httpcore emit through stdlib logging are forwarded to the same sinks.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

from ..settings import settings

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib log records of the HTTP stack to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging-module frames so loguru reports the httpx caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    format: str | None = None,
    log_file: str | Path | None = None,
    rotation: str = "20 MB",
    retention: str = "1 week",
) -> None:
    """
    Replace loguru's sinks with the vfpipe ones.

    Args:
        level: Minimum level for every sink
        format: Message format (defaults to DEFAULT_FORMAT)
        log_file: Optional file sink, rotated and zipped
        rotation: When to rotate the file sink
        retention: How long to keep rotated files
    """
    format = format or DEFAULT_FORMAT
    logger.remove()
    logger.add(sys.stderr, level=level, format=format, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=level,
            format=format,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )

    for name in ("httpx", "httpcore"):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False


setup_logging(
    level=settings.log_level,
    format=settings.log_format,
    log_file=settings.get_log_dir() / "vfpipe.log" if settings.log_to_file else None,
    rotation=settings.log_rotation,
    retention=settings.log_retention,
)

__all__ = ["logger", "setup_logging"]
