"""Metadata models for file watcher system."""

import fnmatch
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from common.utils import LOG_FILE_NAME

GLOB_CHARACTERS = ("*", "?", "[")


@dataclass(frozen=True)
class WatchPolicy:
    """Fixed watch behaviour shared by every session."""

    depth: int = 1
    follow_symlinks: bool = False
    ignore_dotfiles: bool = True
    ignored_names: Tuple[str, ...] = (LOG_FILE_NAME,)
    await_write_finish: bool = True
    stability_threshold: float = 2.0


@dataclass(frozen=True)
class WatchScope:
    """One resolved watch target and the paths it reports.

    A scope is either a directory (reports entries up to ``depth + 1``
    segments below it), a trailing wildcard such as ``/tmp/proj/*`` (reports
    only relative paths matching the pattern segment-wise), or a single file.
    """

    target: str
    base: str
    pattern: Optional[Tuple[str, ...]] = None
    single_file: bool = False

    @classmethod
    def from_target(cls, target: str) -> "WatchScope":
        head, tail = os.path.split(target.rstrip(os.sep) or target)
        if any(char in tail for char in GLOB_CHARACTERS):
            return cls(target=target, base=head or os.curdir, pattern=(tail,))
        if os.path.isfile(target):
            return cls(target=target, base=head or os.curdir, single_file=True)
        return cls(target=target, base=target)

    def is_recursive(self, depth: int) -> bool:
        if self.single_file:
            return False
        if self.pattern is not None:
            return len(self.pattern) > 1
        return depth >= 1

    def relative_parts(self, path: str) -> Optional[List[str]]:
        relative = os.path.relpath(path, self.base)
        if relative == os.curdir:
            return []
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
        return relative.split(os.sep)

    def reports(self, path: str, policy: WatchPolicy) -> bool:
        """Return True if an event for ``path`` belongs to this scope."""
        if self.single_file:
            return os.path.normpath(path) == os.path.normpath(self.target)

        parts = self.relative_parts(path)
        if parts is None:
            return False

        if any(self._is_ignored(part, policy) for part in parts):
            return False

        if self.pattern is not None:
            return len(parts) == len(self.pattern) and all(
                fnmatch.fnmatch(part, pattern)
                for part, pattern in zip(parts, self.pattern)
            )

        return len(parts) <= policy.depth + 1

    @staticmethod
    def _is_ignored(part: str, policy: WatchPolicy) -> bool:
        if policy.ignore_dotfiles and part.startswith("."):
            return True
        return part in policy.ignored_names


@dataclass
class WatcherMetadata:
    """Metadata for one requester's watch session."""

    requester_id: str
    targets: List[str] = field(default_factory=list)
    is_active: bool = False
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
