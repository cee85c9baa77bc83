"""Home directory placeholder handling for user supplied paths."""

import os
from pathlib import Path
from typing import List, Sequence, Union

HOME_TOKEN = "~"
HOME_ENV_TOKEN = "%HOME%"


def home_directory() -> str:
    return str(Path.home())


def resolve_home(path: str) -> str:
    """Expand a leading ``~`` or ``%HOME%`` into the home directory.

    Paths that start with neither token are returned unchanged.

    Args:
        path: User supplied path, e.g. ``~/docs`` or ``%HOME%/docs``

    Returns:
        The path with the placeholder replaced by the home directory
    """
    if not (path.startswith(HOME_TOKEN) or path.startswith(HOME_ENV_TOKEN)):
        return path

    home = home_directory()
    if path.startswith(HOME_TOKEN):
        path = home + path[len(HOME_TOKEN):]
    if path.startswith(HOME_ENV_TOKEN):
        path = home + path[len(HOME_ENV_TOKEN):]
    return path


def resolve_path(path: str) -> str:
    """Expand the home placeholder and make ``path`` absolute.

    Relative paths are taken from the current working directory.
    """
    return os.path.abspath(resolve_home(path))


def shorten_home(path: str) -> str:
    """Convert ``/Users/somename/file.txt`` into ``~/file.txt``.

    Only a prefix that ends on a path separator counts, so a sibling such as
    ``/Users/somename2`` is left alone.
    """
    home = home_directory().rstrip(os.sep) or os.sep
    if path == home:
        return HOME_TOKEN
    if path.startswith(home + os.sep):
        return os.path.join(HOME_TOKEN, path[len(home) + 1:])
    return path


def resolve_target(target: Union[str, Sequence[str]]) -> List[str]:
    """Resolve a watch target (one path or an ordered sequence of paths)."""
    if isinstance(target, str):
        return [resolve_path(target)]
    return [resolve_path(item) for item in target]
