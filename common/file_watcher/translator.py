"""Translate raw watch callbacks into uniform change events."""

import os
import stat
from collections.abc import Mapping
from typing import Any, Optional, Union

from common.models import (
    ChangeEvent,
    DetailClassification,
    EventKind,
    NoDetail,
    StatSnapshot,
    WithDetail,
)
from common.stats import snapshot_from_stat
from common.utils import logger, posix_parse


def _resolve_flag(raw: Any, *names: str) -> Optional[bool]:
    """Read the first of ``names`` from ``raw`` as a concrete boolean.

    Mappings are read by key, other objects by attribute; callables are
    invoked. Returns None when no name resolves to a bool.
    """
    for name in names:
        if isinstance(raw, Mapping):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)

        if callable(value):
            try:
                value = value()
            except (TypeError, OSError):
                continue

        if isinstance(value, bool):
            return value
    return None


def _resolve_number(raw: Any, *names: str) -> Union[int, float]:
    for name in names:
        value = raw.get(name) if isinstance(raw, Mapping) else getattr(raw, name, None)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return 0


def directory_indicator(raw: Any) -> Optional[bool]:
    """Return whether ``raw`` describes a directory, or None if it is not stat-like."""
    if raw is None:
        return None
    if isinstance(raw, StatSnapshot):
        return raw.is_directory

    st_mode = getattr(raw, "st_mode", None)
    if isinstance(st_mode, int) and not isinstance(st_mode, bool):
        return stat.S_ISDIR(st_mode)

    return _resolve_flag(raw, "isDirectory", "is_directory", "is_dir")


def classify_detail(path: str, raw: Any) -> DetailClassification:
    """Classify a raw watch payload as ``NoDetail`` or ``WithDetail``."""
    is_directory = directory_indicator(raw)
    if is_directory is None:
        return NoDetail()

    if isinstance(raw, StatSnapshot):
        return WithDetail(
            snapshot=raw.model_copy(update={"path": path, **posix_parse(path)})
        )

    if isinstance(raw, os.stat_result):
        return WithDetail(snapshot=snapshot_from_stat(path, raw))

    is_file = _resolve_flag(raw, "isFile", "is_file")
    is_symbolic_link = _resolve_flag(raw, "isSymbolicLink", "is_symbolic_link", "is_symlink")
    return WithDetail(
        snapshot=StatSnapshot(
            path=path,
            is_directory=is_directory,
            is_file=is_file if is_file is not None else not is_directory,
            is_symbolic_link=bool(is_symbolic_link),
            size=int(_resolve_number(raw, "size", "st_size")),
            modified_time=float(_resolve_number(raw, "mtime", "modifiedTime", "st_mtime")),
            **posix_parse(path),
        )
    )


class ChangeEventTranslator:
    """Turns ``(kind, path, raw detail)`` callbacks into :class:`ChangeEvent`."""

    def translate(
        self, event_kind: Union[EventKind, str], path: str, raw_detail: Any = None
    ) -> ChangeEvent:
        kind = EventKind(event_kind)
        classification = classify_detail(path, raw_detail)

        if isinstance(classification, WithDetail):
            return ChangeEvent(event_kind=kind, path=path, details=classification.snapshot)

        logger.info(f"Change event without stat details: {kind.value} {path} ({raw_detail!r})")
        return ChangeEvent(event_kind=kind, path=path)
