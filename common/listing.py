"""Directory listings with per-entry stat snapshots."""

import asyncio
import os
from typing import List, Optional

from common.errors import DirectoryReadFailure, StatFailure
from common.models import DirectoryListing, StatSnapshot
from common.paths import resolve_path
from common.stats import snapshot
from common.utils import logger

DEFAULT_MAX_CONCURRENCY = 64


class DirectoryListingService:
    """Lists a directory and resolves a snapshot for every entry concurrently.

    A failure to stat a single entry (permission error, entry deleted between
    enumeration and stat) drops that entry with a warning. Only a failure to
    enumerate the directory itself fails the listing.
    """

    def __init__(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        self.max_concurrency = max(1, max_concurrency)

    async def list(self, path: str) -> DirectoryListing:
        """List ``path``.

        Args:
            path: Directory to list, may start with ``~`` or ``%HOME%``

        Returns:
            DirectoryListing in enumeration order, minus entries that failed

        Raises:
            DirectoryReadFailure: If the directory cannot be enumerated
        """
        dir_path = resolve_path(path)
        names = await self._read_names(dir_path)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self._snapshot_entry(dir_path, name, semaphore) for name in names)
        )
        entries: List[StatSnapshot] = [entry for entry in results if entry is not None]

        logger.debug(
            f"Listed {dir_path}: {len(entries)} of {len(names)} entries resolved"
        )
        return DirectoryListing(path=dir_path, entries=entries)

    async def _read_names(self, dir_path: str) -> List[str]:
        try:
            return await asyncio.to_thread(os.listdir, dir_path)
        except OSError as e:
            logger.error(f"Failed to read directory {dir_path}: {e}")
            raise DirectoryReadFailure(dir_path, e) from e

    async def _snapshot_entry(
        self, dir_path: str, name: str, semaphore: asyncio.Semaphore
    ) -> Optional[StatSnapshot]:
        full_path = os.path.join(dir_path, name)
        async with semaphore:
            try:
                return await asyncio.to_thread(snapshot, full_path)
            except StatFailure as e:
                logger.warning(f"getStats failed for {name} in {dir_path}: {e.cause}")
                return None
