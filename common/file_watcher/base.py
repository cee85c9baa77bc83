"""Base watcher registry interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

from .metadata import WatcherMetadata

WatchTarget = Union[str, Sequence[str]]


class BaseWatcherRegistry(ABC):
    """Abstract registry mapping requester ids to watch sessions."""

    @abstractmethod
    def start(self, requester_id: str, target: WatchTarget) -> WatcherMetadata:
        """Start watching ``target`` for ``requester_id``.

        Any session the requester already has is stopped completely before
        the new one is created.

        Args:
            requester_id: Identity of the consumer owning the session
            target: One path or an ordered sequence of paths, optionally
                ending in a wildcard segment

        Returns:
            WatcherMetadata of the new session

        Raises:
            WatchError: If the native watch cannot be opened
        """
        pass

    @abstractmethod
    def add(self, requester_id: str, target: WatchTarget) -> bool:
        """Extend the requester's session with more targets.

        Returns:
            True if a session existed and was extended, False otherwise
        """
        pass

    @abstractmethod
    def stop(self, requester_id: Optional[str] = None) -> int:
        """Stop one requester's session, or every session when no id is given.

        Returns:
            Number of sessions stopped
        """
        pass

    @abstractmethod
    def list_watchers(self) -> List[WatcherMetadata]:
        """Get metadata for all active sessions."""
        pass

    @abstractmethod
    def get_watcher(self, requester_id: str) -> Optional[WatcherMetadata]:
        """Get metadata for one requester, None if it has no session."""
        pass
