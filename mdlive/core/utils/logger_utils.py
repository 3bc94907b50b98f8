"""loguru setup shared by the services and the command line entry point."""

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {file}:{line} | {function} | {message}"


def init_logger(
    log_dir: str | Path = "logs",
    level: str = "INFO",
    log_to_console: bool = True,
    log_to_file: bool = False,
    app_name: str = "mdlive",
    rotation: str = "00:00",
    retention: str = "7 days",
) -> Path | None:
    """Replace loguru's default sink with the configured console and file sinks.

    Args:
        log_dir: Directory receiving the log file
        level: Minimum level for every sink
        log_to_console: Whether to log colorized lines to stdout
        log_to_file: Whether to write a rotating, zipped log file under ``log_dir``
        app_name: Prefix of the log file name
        rotation: loguru rotation condition for the file sink
        retention: loguru retention for rotated files

    Returns:
        The log file path, or None without a file sink.
    """
    logger.remove()

    log_path: Path | None = None
    if log_to_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        # no colons in the name, Windows rejects them
        log_path = Path(log_dir) / f"{app_name}_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"
        logger.add(
            log_path,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            encoding="utf-8",
            format=LOG_FORMAT,
        )

    if log_to_console:
        logger.add(sys.stdout, level=level, format=LOG_FORMAT, colorize=True)

    return log_path
