from pathlib import Path

from loguru import logger
from rich.console import Console

__all__ = [
    "LOG_DIR",
    "LOG_FILE_NAME",
    "console",
    "logger",
    "posix_parse",
]

LOG_DIR = Path(".fileview")
LOG_FILE_NAME = "fileview.log"

console = Console()

# Remove Loguru's default stdout sink to prevent terminal output
logger.remove()

log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS zz}</green> | <level>{level: <8}</level> | <yellow>Line {line: >4} ({file}):</yellow> <b>{message}</b>"
logger.add(
    LOG_DIR / "debug.log",
    level="DEBUG",
    format=log_format,
    colorize=False,
    backtrace=True,
    diagnose=True,
)
logger.add(
    LOG_DIR / LOG_FILE_NAME,
    level="INFO",
    format=log_format,
    colorize=False,
    backtrace=True,
    diagnose=True,
)


def posix_parse(path: str) -> dict[str, str]:
    """Split a path into root, directory, base name, name and extension.

    ``/home/u/notes.txt`` becomes ``{"root": "/", "directory": "/home/u",
    "base_name": "notes.txt", "name": "notes", "extension": ".txt"}``.
    """
    pure = Path(path)
    base_name = pure.name
    extension = pure.suffix
    name = base_name[: -len(extension)] if extension else base_name
    directory = str(pure.parent) if base_name else str(pure)
    return {
        "root": pure.anchor,
        "directory": directory,
        "base_name": base_name,
        "name": name,
        "extension": extension,
    }
