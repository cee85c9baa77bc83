"""File service commands exposed to the transport."""

from typing import Any, List, Optional, Union

from common.containers import container
from common.decorators import Command
from common.file_io import copy_file as copy_file_contents
from common.file_io import read_json_safe, save_to_temporary_file as save_temporary
from common.paths import resolve_home, shorten_home
from common.stats import snapshot
from common.utils import logger


@Command
async def get_files(path: str) -> dict[str, Any]:
    """List a directory with a stat snapshot per entry.

    Args:
        path: Directory to list; may start with ``~`` or ``%HOME%``

    Returns:
        Directory listing as a wire dict
    """
    listing = await container.listing_service().list(path)
    return listing.to_wire()


@Command
def get_file_stats(path: str) -> dict[str, Any]:
    """Return the stat snapshot of a single path."""
    return snapshot(path).to_wire()


@Command
def start_watching(requester_id: str, target: Union[str, List[str]]) -> dict[str, Any]:
    """Start watching ``target`` for a requester, replacing its previous session.

    Args:
        requester_id: Identity of the consumer owning the session
        target: One path or an ordered list of paths; a trailing ``*`` segment
            watches the entries directly inside a directory

    Returns:
        Watcher metadata
    """
    metadata = container.watcher_registry().start(requester_id, target)
    return {
        "requesterId": metadata.requester_id,
        "targets": list(metadata.targets),
        "isActive": metadata.is_active,
        "createdAt": metadata.created_at,
    }


@Command
def add_watching(requester_id: str, target: Union[str, List[str]]) -> bool:
    """Add targets to a requester's running session; False if it has none."""
    return container.watcher_registry().add(requester_id, target)


@Command
def stop_watching(requester_id: Optional[str] = None) -> int:
    """Stop one requester's session, or all sessions when no id is given."""
    return container.watcher_registry().stop(requester_id)


@Command
def list_watching() -> List[dict[str, Any]]:
    """Describe every active watch session."""
    return [
        {
            "requesterId": metadata.requester_id,
            "targets": list(metadata.targets),
            "isActive": metadata.is_active,
            "createdAt": metadata.created_at,
        }
        for metadata in container.watcher_registry().list_watchers()
    ]


@Command
def read_json_file(path: str) -> Optional[Any]:
    """Read a JSON file; invalid or missing files yield None."""
    return read_json_safe(path)


@Command
async def save_to_temporary_file(suffix: str, data: str) -> str:
    """Save text to a temporary file removed at exit; returns its path."""
    return await save_temporary(suffix, data)


@Command
def copy_file(src: str, dest: str) -> None:
    """Copy one file to another location."""
    copy_file_contents(src, dest)


@Command
def resolve_home_directory(path: str) -> str:
    """Expand a leading ``~`` or ``%HOME%``."""
    return resolve_home(path)


@Command
def shorten_home_directory(path: str) -> str:
    """Replace the home directory prefix with ``~``."""
    return shorten_home(path)


# Export all commands
file_tools = [
    get_files,
    get_file_stats,
    start_watching,
    add_watching,
    stop_watching,
    list_watching,
    read_json_file,
    save_to_temporary_file,
    copy_file,
    resolve_home_directory,
    shorten_home_directory,
]

commands_by_name = {command.command_name: command for command in file_tools}


def invoke(command_name: str, payload: Optional[dict[str, Any]] = None) -> Any:
    """Invoke a command by name with a payload from the transport.

    Async commands return an awaitable.

    Raises:
        KeyError: If no command has that name
        pydantic.ValidationError: If the payload does not match the parameters
    """
    if command_name not in commands_by_name:
        logger.warning(f"Unknown command requested: {command_name}")
        raise KeyError(command_name)
    return commands_by_name[command_name].invoke(payload)
