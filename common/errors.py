"""Error types raised by the file service."""

from typing import Optional


class FileServiceError(Exception):
    """Base class for file service failures.

    Every error carries the path it concerns so that callers and logs can
    identify the failing location without parsing the message.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class StatFailure(FileServiceError):
    """Both the lstat and the stat call failed for a path."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Unable to stat {path}: {cause}", path=path, cause=cause)


class DirectoryReadFailure(FileServiceError):
    """Enumerating a directory failed."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"Unable to read directory {path}: {cause}", path=path, cause=cause
        )


class WatchError(FileServiceError):
    """The native watch mechanism failed for a requester's session."""

    def __init__(
        self,
        message: str,
        requester_id: Optional[str] = None,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, path=path, cause=cause)
        self.requester_id = requester_id


class TimeoutFailure(FileServiceError):
    """A bounded resource operation exceeded its deadline."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, path=path)
