"""File viewer flows: list a directory, then keep watching what is shown."""

import asyncio
import os
from typing import Optional

from common.containers import container
from common.models import DirectoryListing
from common.paths import resolve_path
from common.utils import logger

REQUESTER_ID = "file-viewer"


def _watch_pattern(path: str) -> str:
    return os.path.join(resolve_path(path), "*")


async def list_with_minimum_duration(
    path: str, minimum_duration: Optional[float] = None
) -> DirectoryListing:
    """List ``path`` but resolve no sooner than ``minimum_duration`` seconds.

    The delay keeps quick listings from flickering through the viewer's
    animation. A failing listing fails right away without waiting for the
    delay.
    """
    if minimum_duration is None:
        minimum_duration = container.config.listing.minimum_duration()

    listing, _ = await asyncio.gather(
        container.listing_service().list(path),
        asyncio.sleep(minimum_duration),
    )
    return listing


async def get_viewed_files(
    path: str, minimum_duration: Optional[float] = None
) -> DirectoryListing:
    """Show ``path`` in the viewer and watch the entries inside it."""
    listing = await list_with_minimum_duration(path, minimum_duration)
    container.watcher_registry().start(REQUESTER_ID, _watch_pattern(listing.path))
    logger.info(f"Viewing {listing.path} ({len(listing.entries)} entries)")
    return listing


async def expand_folder(path: str) -> DirectoryListing:
    """List a sub folder opened in the viewer and add it to the watch."""
    listing = await container.listing_service().list(path)
    container.watcher_registry().add(REQUESTER_ID, _watch_pattern(listing.path))
    return listing


def parent_directory(path: str) -> str:
    return os.path.dirname(os.path.normpath(resolve_path(path))) or os.sep


def close_viewer() -> int:
    return container.watcher_registry().stop(REQUESTER_ID)
