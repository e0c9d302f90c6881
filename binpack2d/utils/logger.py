"""
Logging Utilities

Library modules only create module-level loggers under the "binpack2d"
namespace and log packing passes and hole searches at DEBUG. Handlers are
attached here, by the entry point, to the namespace root so one call
captures every module's output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def reset_logger(name: str = "binpack2d") -> logging.Logger:
    """Detach and close every handler of the named logger."""
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    return logger


def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logger(
    name: str = "binpack2d",
    log_file: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
) -> logging.Logger:
    """
    Route packing logs to stdout and, optionally, a file.

    Calling it again replaces the handlers of the previous call, so a script
    run several times in one process does not repeat its output.

    Args:
        name: Logger name; "binpack2d" also captures the library's messages
        log_file: Path to log file, parent directories are created
        level: Logging level, as a number or a name such as "DEBUG"

    Returns:
        Configured logger

    Example:
        >>> logger = setup_logger(log_file="logs/pack.log", level="DEBUG")
        >>> logger.info("Packing...")
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    logger = reset_logger(name)
    logger.setLevel(level)

    _attach(logger, logging.StreamHandler(sys.stdout), level)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_path), level)

    return logger
