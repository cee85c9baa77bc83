"""Concrete watcher registry using watchdog."""

import os
import threading
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from common.errors import WatchError
from common.models import EventKind
from common.paths import resolve_target
from common.utils import logger

from .base import BaseWatcherRegistry, WatchTarget
from .debounce import WriteDebouncer
from .dispatcher import Dispatcher
from .metadata import WatcherMetadata, WatchPolicy, WatchScope
from .translator import ChangeEventTranslator

STAT_KINDS = (EventKind.ADD, EventKind.CHANGE, EventKind.ADD_DIR)
WRITE_KINDS = (EventKind.ADD, EventKind.CHANGE)


class SessionEventHandler(FileSystemEventHandler):
    """Maps watchdog callbacks onto change event kinds for one session."""

    def __init__(self, session: "WatchSession") -> None:
        super().__init__()
        self.session = session

    def _handle(self, kind: EventKind, raw_path: Any) -> None:
        # Handle both string and bytes paths
        path = os.fsdecode(raw_path)
        try:
            self.session.receive(kind, path)
        except Exception as e:
            try:
                self.session.report_error(path, e)
            except Exception as report_error:
                logger.error(f"Unable to report watcher error for {path}: {report_error}")

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle(EventKind.ADD_DIR if event.is_directory else EventKind.ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        # Directory mtime changes are implied by the entry events inside them
        if event.is_directory:
            return
        self._handle(EventKind.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle(
            EventKind.UNLINK_DIR if event.is_directory else EventKind.UNLINK, event.src_path
        )

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._handle(EventKind.UNLINK_DIR, event.src_path)
            self._handle(EventKind.ADD_DIR, event.dest_path)
        else:
            self._handle(EventKind.UNLINK, event.src_path)
            self._handle(EventKind.ADD, event.dest_path)


class WatchSession:
    """One requester's live observer plus the targets it watches."""

    def __init__(
        self,
        metadata: WatcherMetadata,
        policy: WatchPolicy,
        translator: ChangeEventTranslator,
        dispatcher: Dispatcher,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.metadata = metadata
        self.policy = policy
        self.translator = translator
        self.dispatcher = dispatcher
        self.observer: Any = observer_factory()
        self.event_handler = SessionEventHandler(self)
        self.debouncer = WriteDebouncer(self._emit, policy.stability_threshold)
        self._scopes: List[WatchScope] = []
        self._watches: Dict[str, Tuple[Any, bool]] = {}
        self._lock = RLock()
        self._closed = False
        self._is_running = False

    @property
    def is_running(self) -> bool:
        """Check if the session is currently running."""
        return self._is_running and not self._closed and self.observer.is_alive()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, targets: List[str]) -> None:
        try:
            self._add_scopes(targets)
            self.observer.start()
        except OSError as e:
            self.stop()
            raise WatchError(
                f"Unable to start watching {targets}: {e}",
                requester_id=self.metadata.requester_id,
                cause=e,
            ) from e
        except WatchError:
            self.stop()
            raise

        self._is_running = True
        self.metadata.is_active = True
        logger.info(f"Started watcher {self.metadata.requester_id} for {targets}")

        for target in targets:
            self._emit(EventKind.READY, target)

    def add(self, targets: List[str]) -> List[str]:
        """Schedule targets not already watched; returns the newly added ones."""
        with self._lock:
            new_targets = [t for t in targets if t not in self.metadata.targets]

        self._add_scopes(new_targets)
        for target in new_targets:
            self._emit(EventKind.READY, target)
        return new_targets

    def stop(self) -> None:
        """Stop the observer and cancel pending writes.

        Once this returns no further event of this session is dispatched.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        if self.observer.is_alive():
            self.observer.stop()
            # A transport listener may stop the session from the observer thread itself
            if self.observer is not threading.current_thread():
                self.observer.join(timeout=5.0)

        self.debouncer.close()
        self._is_running = False
        self.metadata.is_active = False
        logger.info(f"Stopped watcher {self.metadata.requester_id}")

    def reports(self, path: str) -> bool:
        with self._lock:
            scopes = list(self._scopes)
        return any(scope.reports(path, self.policy) for scope in scopes)

    def receive(self, kind: EventKind, path: str) -> None:
        """Route one native callback: filter, debounce, then emit."""
        if self._closed or not self.reports(path):
            return

        if kind in WRITE_KINDS and self.policy.await_write_finish:
            self.debouncer.submit(kind, path)
            return

        if kind is EventKind.UNLINK:
            # A file removed before its add settled was never announced
            if self.debouncer.discard(path) is EventKind.ADD:
                logger.debug(f"Dropped unannounced {path} removed before its write settled")
                return
        elif kind is EventKind.UNLINK_DIR:
            dropped = self.debouncer.discard_under(path)
            if dropped:
                logger.debug(f"Dropped {dropped} pending write(s) under removed {path}")

        self._emit(kind, path)

    def report_error(self, path: str, error: BaseException) -> None:
        logger.error(
            f"Error handling event for {path} "
            f"(requester {self.metadata.requester_id}): {error}"
        )
        event = self.translator.translate(EventKind.ERROR, path, None)
        with self._lock:
            if self._closed:
                return
            self.dispatcher.dispatch(event)

    def _emit(self, kind: EventKind, path: str) -> None:
        raw_detail = self._stat(path) if kind in STAT_KINDS else None
        event = self.translator.translate(kind, path, raw_detail)

        with self._lock:
            if self._closed:
                return
            self.dispatcher.dispatch(event)

    def _stat(self, path: str) -> Optional[os.stat_result]:
        try:
            return os.stat(path) if self.policy.follow_symlinks else os.lstat(path)
        except OSError as e:
            logger.warning(
                f"Stat failed for {path} (requester {self.metadata.requester_id}): {e}"
            )
            return None

    def _add_scopes(self, targets: List[str]) -> None:
        for target in targets:
            scope = WatchScope.from_target(target)
            if not os.path.isdir(scope.base):
                raise WatchError(
                    f"Path does not exist or is not a directory: {scope.base}",
                    requester_id=self.metadata.requester_id,
                    path=target,
                )

            self._schedule(scope.base, scope.is_recursive(self.policy.depth))
            with self._lock:
                self._scopes.append(scope)
                self.metadata.targets.append(target)

    def _schedule(self, base: str, recursive: bool) -> None:
        existing = self._watches.get(base)
        if existing and (existing[1] or not recursive):
            return

        try:
            if existing:
                self.observer.unschedule(existing[0])
            watch = self.observer.schedule(self.event_handler, base, recursive=recursive)
        except OSError as e:
            raise WatchError(
                f"Unable to watch {base}: {e}",
                requester_id=self.metadata.requester_id,
                path=base,
                cause=e,
            ) from e

        self._watches[base] = (watch, recursive)


class WatchdogWatcherRegistry(BaseWatcherRegistry):
    """Registry of watch sessions keyed by requester id.

    Starting, extending and stopping the session of one requester is
    serialized on that requester's own lock; different requesters never
    wait on each other.
    """

    def __init__(
        self,
        translator: ChangeEventTranslator,
        dispatcher: Dispatcher,
        policy: Optional[WatchPolicy] = None,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        super().__init__()
        self.translator = translator
        self.dispatcher = dispatcher
        self.policy = policy or WatchPolicy()
        self._observer_factory = observer_factory
        self._sessions: Dict[str, WatchSession] = {}
        self._requester_locks: Dict[str, RLock] = {}
        self._lock = RLock()

    def _requester_lock(self, requester_id: str) -> RLock:
        with self._lock:
            return self._requester_locks.setdefault(requester_id, RLock())

    def start(self, requester_id: str, target: WatchTarget) -> WatcherMetadata:
        targets = resolve_target(target)
        logger.info(f"startWatching {requester_id} {targets}")

        with self._requester_lock(requester_id):
            with self._lock:
                previous = self._sessions.pop(requester_id, None)
            if previous:
                previous.stop()
                logger.info(f"Replaced previous watcher for {requester_id}")

            session = WatchSession(
                metadata=WatcherMetadata(requester_id=requester_id),
                policy=self.policy,
                translator=self.translator,
                dispatcher=self.dispatcher,
                observer_factory=self._observer_factory,
            )
            session.start(targets)

            with self._lock:
                self._sessions[requester_id] = session

        return session.metadata

    def add(self, requester_id: str, target: WatchTarget) -> bool:
        targets = resolve_target(target)
        logger.info(f"addWatching {requester_id} {targets}")

        with self._requester_lock(requester_id):
            with self._lock:
                session = self._sessions.get(requester_id)
            if session is None:
                logger.info(f"No watcher for {requester_id}; ignoring add of {targets}")
                return False

            session.add(targets)
        return True

    def stop(self, requester_id: Optional[str] = None) -> int:
        if requester_id is None:
            with self._lock:
                requester_ids = list(self._sessions)
            return sum(self._stop_one(rid) for rid in requester_ids)

        return self._stop_one(requester_id)

    def _stop_one(self, requester_id: str) -> int:
        with self._requester_lock(requester_id):
            with self._lock:
                session = self._sessions.pop(requester_id, None)
            if session is None:
                return 0
            session.stop()
        return 1

    def list_watchers(self) -> List[WatcherMetadata]:
        with self._lock:
            return [session.metadata for session in self._sessions.values()]

    def get_watcher(self, requester_id: str) -> Optional[WatcherMetadata]:
        with self._lock:
            session = self._sessions.get(requester_id)
            return session.metadata if session else None

    def get_session(self, requester_id: str) -> Optional[WatchSession]:
        with self._lock:
            return self._sessions.get(requester_id)
