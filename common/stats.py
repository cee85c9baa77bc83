"""Stat snapshots that can cross a process boundary."""

import os
import stat

from common.errors import StatFailure
from common.models import StatSnapshot
from common.paths import resolve_path
from common.utils import logger, posix_parse


def snapshot_from_stat(path: str, stat_result: os.stat_result) -> StatSnapshot:
    """Build an immutable snapshot from a raw stat result.

    The directory, file and symlink flags are evaluated here, once, so the
    snapshot stays correct after the entry changes on disk.
    """
    mode = stat_result.st_mode
    return StatSnapshot(
        path=path,
        is_directory=stat.S_ISDIR(mode),
        is_file=stat.S_ISREG(mode),
        is_symbolic_link=stat.S_ISLNK(mode),
        size=stat_result.st_size,
        modified_time=stat_result.st_mtime,
        accessed_time=stat_result.st_atime,
        changed_time=stat_result.st_ctime,
        mode=mode,
        ino=stat_result.st_ino,
        dev=stat_result.st_dev,
        nlink=stat_result.st_nlink,
        uid=stat_result.st_uid,
        gid=stat_result.st_gid,
        **posix_parse(path),
    )


def snapshot(path: str) -> StatSnapshot:
    """Stat ``path`` without following symlinks, falling back to ``stat``.

    Raises:
        StatFailure: If both ``lstat`` and ``stat`` fail
    """
    path = resolve_path(path)
    try:
        stat_result = os.lstat(path)
    except OSError as lstat_error:
        logger.warning(f"lstat failed for {path}: {lstat_error}")
        try:
            stat_result = os.stat(path)
        except OSError as stat_error:
            raise StatFailure(path, stat_error) from stat_error

    return snapshot_from_stat(path, stat_result)
