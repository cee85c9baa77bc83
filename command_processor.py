"""
Command processor module for the fileview CLI.
Handles parsing and executing user commands.
"""

import asyncio
import datetime
import os
import shlex
from typing import Any, Callable, Dict, Optional

from rich.table import Table

from common.containers import container
from common.errors import FileServiceError
from common.file_watcher.base import BaseWatcherRegistry
from common.listing import DirectoryListingService
from common.models import DirectoryListing
from common.paths import resolve_home, shorten_home
from tools import file_viewer

CLI_REQUESTER_ID = "cli"
VERSION = "0.1.0"


def render_listing(listing: DirectoryListing) -> Table:
    """Render a directory listing as a rich table."""
    table = Table(title=shorten_home(listing.path), title_justify="left")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for entry in listing.entries:
        if entry.is_symbolic_link:
            kind = "link"
        elif entry.is_directory:
            kind = "dir"
        else:
            kind = "file"
        modified = datetime.datetime.fromtimestamp(entry.modified_time)
        table.add_row(
            entry.base_name,
            kind,
            "" if entry.is_directory else str(entry.size),
            modified.strftime("%Y-%m-%d %H:%M"),
        )
    return table


class CommandProcessor:
    """
    Processes and executes commands entered by the user in the CLI.
    """

    def __init__(
        self,
        registry: Optional[BaseWatcherRegistry] = None,
        listing_service: Optional[DirectoryListingService] = None,
    ) -> None:
        self.registry = registry or container.watcher_registry()
        self.listing_service = listing_service or container.listing_service()
        self.commands: Dict[str, Callable[[str], Any]] = {
            "/help": self.show_help,
            "/version": self.show_version,
            "/ls": self.list_directory,
            "/watch": self.start_watching,
            "/add": self.add_watching,
            "/unwatch": self.stop_watching,
            "/watchers": self.show_watchers,
            "/view": self.view_directory,
            "/expand": self.expand_folder,
            "/up": self.view_parent,
            "/close": self.close_view,
        }
        self.viewed_path: Optional[str] = None

    def process_command(self, command_text: str) -> Any:
        """
        Process a command string and execute the appropriate action.

        Args:
            command_text (str): The command entered by the user

        Returns:
            The result of the command execution, a string or a rich renderable
        """
        command_parts = command_text.strip().split(maxsplit=1)
        if not command_parts:
            return ""

        command_name = command_parts[0].lower()
        args = command_parts[1] if len(command_parts) > 1 else ""

        if command_name not in self.commands:
            return (
                f"Command not found: {command_name}. Type '/help' for available commands."
            )

        try:
            return self.commands[command_name](args)
        except FileServiceError as e:
            return f"[red]Error: {e}[/red]"

    def show_help(self, args: str = "") -> str:
        """Display help information about available commands"""
        help_text = """
Available Commands:
------------------
/help               - Show this help message
/version            - Show the current version of the fileview CLI
/ls [path]          - List a directory (defaults to the current one)
/watch <path> ...   - Watch paths, replacing the current watch
/add <path> ...     - Add paths to the current watch
/unwatch [id|all]   - Stop the CLI watch, another requester's, or every watch
/watchers           - Show active watch sessions
/view [path]        - View a directory and watch its entries
/expand <folder>    - Expand a folder of the viewed directory
/up                 - View the parent of the viewed directory
/close              - Close the viewer and stop its watch
/exit               - Exit the CLI application

Paths may start with ~ and may end in a wildcard, e.g. ~/projects/*
        """
        return help_text.strip()

    def show_version(self, args: str = "") -> str:
        """Display the current version of the CLI"""
        return f"fileview CLI v{VERSION}"

    def list_directory(self, args: str = "") -> Table:
        path = args.strip() or "."
        listing = asyncio.run(self.listing_service.list(path))
        return render_listing(listing)

    def start_watching(self, args: str = "") -> str:
        paths = shlex.split(args)
        if not paths:
            return "Usage: /watch <path> [<path> ...]"
        metadata = self.registry.start(CLI_REQUESTER_ID, paths)
        return f"Watching {', '.join(shorten_home(t) for t in metadata.targets)}"

    def add_watching(self, args: str = "") -> str:
        paths = shlex.split(args)
        if not paths:
            return "Usage: /add <path> [<path> ...]"
        if not self.registry.add(CLI_REQUESTER_ID, paths):
            return "Nothing is being watched yet. Use /watch first."
        return f"Added {', '.join(paths)}"

    def stop_watching(self, args: str = "") -> str:
        requester_id = args.strip() or CLI_REQUESTER_ID
        if requester_id == "all":
            count = self.registry.stop()
        else:
            count = self.registry.stop(requester_id)
        return f"Stopped {count} watcher(s)"

    def show_watchers(self, args: str = "") -> str:
        watchers = self.registry.list_watchers()
        if not watchers:
            return "No active watchers"

        lines = []
        for watcher in watchers:
            status = "active" if watcher.is_active else "inactive"
            targets = ", ".join(shorten_home(t) for t in watcher.targets)
            lines.append(f"{watcher.requester_id} ({status}) since {watcher.created_at}: {targets}")
        return "\n".join(lines)

    def view_directory(self, args: str = "") -> Table:
        """Show a directory and keep watching the entries inside it."""
        path = args.strip() or "."
        listing = asyncio.run(file_viewer.get_viewed_files(path))
        self.viewed_path = listing.path
        return render_listing(listing)

    def expand_folder(self, args: str = "") -> Any:
        folder = args.strip()
        if not folder:
            return "Usage: /expand <folder>"
        if self.viewed_path is None:
            return "Nothing is being viewed yet. Use /view first."

        # Relative folders are taken from the viewed directory
        listing = asyncio.run(
            file_viewer.expand_folder(os.path.join(self.viewed_path, resolve_home(folder)))
        )
        return render_listing(listing)

    def view_parent(self, args: str = "") -> Any:
        if self.viewed_path is None:
            return "Nothing is being viewed yet. Use /view first."
        return self.view_directory(file_viewer.parent_directory(self.viewed_path))

    def close_view(self, args: str = "") -> str:
        self.viewed_path = None
        count = file_viewer.close_viewer()
        return f"Closed viewer ({count} watcher(s) stopped)"
