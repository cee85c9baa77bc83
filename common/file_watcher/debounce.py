"""Hold back write notifications until a burst of writes has settled."""

import os
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from common.models import EventKind
from common.utils import logger


@dataclass
class _PendingWrite:
    kind: EventKind
    timer: threading.Timer
    count: int = 1


class WriteDebouncer:
    """Coalesce ``add``/``change`` events per path.

    Each new write for a path restarts its timer. When the timer expires the
    path is emitted once, as ``add`` if the burst started with an add,
    otherwise as ``change``.
    """

    def __init__(
        self,
        emit: Callable[[EventKind, str], None],
        stability_threshold: float = 2.0,
    ) -> None:
        self._emit = emit
        self.stability_threshold = stability_threshold
        self._pending: Dict[str, _PendingWrite] = {}
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, kind: EventKind, path: str) -> None:
        with self._lock:
            if self._closed:
                return

            pending = self._pending.get(path)
            count = 1
            if pending:
                pending.timer.cancel()
                count = pending.count + 1
                if pending.kind is EventKind.ADD:
                    kind = EventKind.ADD

            timer = threading.Timer(self.stability_threshold, self._fire, args=(path,))
            timer.daemon = True
            self._pending[path] = _PendingWrite(kind=kind, timer=timer, count=count)
            timer.start()

    def discard(self, path: str) -> Optional[EventKind]:
        """Drop a pending write for ``path``; returns its kind, or None if none was pending."""
        with self._lock:
            pending = self._pending.pop(path, None)
        if pending is None:
            return None
        pending.timer.cancel()
        return pending.kind

    def discard_under(self, directory: str) -> int:
        """Drop pending writes for every path inside ``directory``."""
        prefix = directory.rstrip(os.sep) + os.sep
        with self._lock:
            paths = [path for path in self._pending if path.startswith(prefix)]
            dropped = [self._pending.pop(path) for path in paths]

        for pending in dropped:
            pending.timer.cancel()
        return len(dropped)

    def close(self) -> None:
        """Cancel every pending write. Nothing is emitted afterwards."""
        with self._lock:
            self._closed = True
            pending = list(self._pending.values())
            self._pending.clear()

        for item in pending:
            item.timer.cancel()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _fire(self, path: str) -> None:
        with self._lock:
            pending = self._pending.get(path)
            if self._closed or pending is None or pending.timer is not threading.current_thread():
                return
            del self._pending[path]

        logger.debug(f"Write settled for {path} after {pending.count} event(s)")
        self._emit(pending.kind, path)
