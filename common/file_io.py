"""Small file helpers: lenient JSON reads, temporary files and copies."""

import asyncio
import atexit
import json
import os
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Optional, Union

from common.errors import TimeoutFailure
from common.paths import resolve_home
from common.utils import logger

TEMPORARY_FILE_TIMEOUT = 10.0
COPY_CHUNK_SIZE = 64 * 1024

_tracked_files: set[str] = set()
_tracked_lock = Lock()


def read_json_safe(path: str) -> Optional[Any]:
    """Read a JSON file, returning None instead of failing.

    A missing or unreadable file returns None silently. A file that is not
    valid JSON returns None with a warning.
    """
    try:
        contents = Path(resolve_home(path)).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    try:
        return json.loads(contents)
    except json.JSONDecodeError as e:
        logger.warning(f"{path} is not valid JSON: {e}")
        return None


def cleanup_temporary_files() -> int:
    """Remove every temporary file created by this process."""
    with _tracked_lock:
        paths = list(_tracked_files)
        _tracked_files.clear()

    removed = 0
    for path in paths:
        try:
            os.remove(path)
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Unable to remove temporary file {path}: {e}")
    return removed


atexit.register(cleanup_temporary_files)


def _write_temporary_file(suffix: str, data: Union[str, bytes]) -> str:
    payload = data.encode("utf-8") if isinstance(data, str) else data
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as handle:
        with _tracked_lock:
            _tracked_files.add(handle.name)
        handle.write(payload)
        return handle.name


async def save_to_temporary_file(
    suffix: str,
    data: Union[str, bytes],
    timeout: float = TEMPORARY_FILE_TIMEOUT,
) -> str:
    """Write ``data`` to a new temporary file and return its path.

    The file is removed when the interpreter exits.

    Raises:
        TimeoutFailure: If the write does not finish within ``timeout`` seconds
    """
    task = asyncio.ensure_future(asyncio.to_thread(_write_temporary_file, suffix, data))
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Timed out trying to save temporary file with extension {suffix}")
        task.add_done_callback(_discard_late_file)
        raise TimeoutFailure(
            f"Timed out trying to save temporary file with extension {suffix}"
        )


def _discard_late_file(task: "asyncio.Future[str]") -> None:
    if task.cancelled() or task.exception() is not None:
        return
    path = task.result()
    with _tracked_lock:
        _tracked_files.discard(path)
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Unable to remove abandoned temporary file {path}: {e}")


def copy_file(src: str, dest: str) -> None:
    """Copy ``src`` to ``dest``; both files are closed on every exit path."""
    src = resolve_home(src)
    dest = resolve_home(dest)
    logger.info(f"copy {src} -> {dest}")

    with open(src, "rb") as reader, open(dest, "wb") as writer:
        shutil.copyfileobj(reader, writer, COPY_CHUNK_SIZE)

    logger.info(f"copy done {src} -> {dest}")
