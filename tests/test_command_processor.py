from pathlib import Path
from typing import Any

import pytest
from rich.table import Table

from command_processor import CLI_REQUESTER_ID, VERSION, CommandProcessor
from common.file_watcher.manager import WatchdogWatcherRegistry
from common.listing import DirectoryListingService
from tools import file_viewer


@pytest.fixture
def processor(registry: WatchdogWatcherRegistry) -> CommandProcessor:
    return CommandProcessor(registry=registry, listing_service=DirectoryListingService())


class TestCommandProcessor:

    def test_unknown_command(self, processor: CommandProcessor) -> None:
        result = processor.process_command("/frobnicate now")

        assert result.startswith("Command not found: /frobnicate")

    def test_empty_command(self, processor: CommandProcessor) -> None:
        assert processor.process_command("   ") == ""

    def test_help_and_version(self, processor: CommandProcessor) -> None:
        assert "/watch <path>" in processor.process_command("/help")
        assert processor.process_command("/VERSION") == f"fileview CLI v{VERSION}"

    def test_list_directory_renders_table(self, processor: CommandProcessor, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("abc")
        (tmp_path / "sub").mkdir()

        table = processor.process_command(f"/ls {tmp_path}")

        assert isinstance(table, Table)
        assert table.row_count == 2
        assert sorted(table.columns[0]._cells) == ["a.txt", "sub"]

    def test_listing_failure_is_reported(self, processor: CommandProcessor, tmp_path: Path) -> None:
        result = processor.process_command(f"/ls {tmp_path / 'missing'}")

        assert result.startswith("[red]Error: Unable to read directory")

    def test_watch_add_and_unwatch(
        self, processor: CommandProcessor, registry: WatchdogWatcherRegistry, tmp_path: Path
    ) -> None:
        other = tmp_path / "other dir"
        other.mkdir()

        assert processor.process_command(f"/watch {tmp_path}") == f"Watching {tmp_path}"
        assert processor.process_command(f"/add '{other}'") == f"Added {other}"
        assert registry.get_watcher(CLI_REQUESTER_ID).targets == [str(tmp_path), str(other)]
        assert CLI_REQUESTER_ID in processor.process_command("/watchers")
        assert processor.process_command("/unwatch") == "Stopped 1 watcher(s)"
        assert processor.process_command("/watchers") == "No active watchers"

    def test_add_requires_running_watch(self, processor: CommandProcessor, tmp_path: Path) -> None:
        assert processor.process_command(f"/add {tmp_path}").startswith("Nothing is being watched")

    def test_usage_without_paths(self, processor: CommandProcessor) -> None:
        assert processor.process_command("/watch").startswith("Usage")
        assert processor.process_command("/add").startswith("Usage")

    def test_watch_failure_is_reported(self, processor: CommandProcessor, tmp_path: Path) -> None:
        result = processor.process_command(f"/watch {tmp_path / 'missing'}")

        assert result.startswith("[red]Error:")

    def test_unwatch_all(
        self, processor: CommandProcessor, registry: WatchdogWatcherRegistry, tmp_path: Path
    ) -> None:
        registry.start("file-viewer", str(tmp_path))
        processor.process_command(f"/watch {tmp_path}")

        assert processor.process_command("/unwatch all") == "Stopped 2 watcher(s)"
        assert registry.list_watchers() == []


class TestViewerCommands:

    @pytest.fixture
    def viewer(self, file_service: Any) -> CommandProcessor:
        return CommandProcessor()

    def test_view_lists_and_watches_directory(
        self, viewer: CommandProcessor, file_service: Any, tmp_path: Path
    ) -> None:
        (tmp_path / "a.txt").write_text("a")

        table = viewer.process_command(f"/view {tmp_path}")

        assert isinstance(table, Table)
        assert table.row_count == 1
        assert viewer.viewed_path == str(tmp_path)
        watcher = file_service.watcher_registry().get_watcher(file_viewer.REQUESTER_ID)
        assert watcher.targets == [str(tmp_path / "*")]

    def test_expand_relative_folder_adds_watch(
        self, viewer: CommandProcessor, file_service: Any, tmp_path: Path
    ) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "inner.txt").write_text("x")
        viewer.process_command(f"/view {tmp_path}")

        table = viewer.process_command("/expand sub")

        assert isinstance(table, Table)
        assert table.columns[0]._cells == ["inner.txt"]
        watcher = file_service.watcher_registry().get_watcher(file_viewer.REQUESTER_ID)
        assert watcher.targets == [str(tmp_path / "*"), str(sub / "*")]

    def test_up_views_parent_directory(
        self, viewer: CommandProcessor, tmp_path: Path
    ) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        viewer.process_command(f"/view {sub}")

        viewer.process_command("/up")

        assert viewer.viewed_path == str(tmp_path)

    def test_commands_need_a_viewed_directory(self, viewer: CommandProcessor) -> None:
        assert viewer.process_command("/up").startswith("Nothing is being viewed")
        assert viewer.process_command("/expand sub").startswith("Nothing is being viewed")
        assert viewer.process_command("/expand").startswith("Usage")

    def test_close_stops_viewer_watch(
        self, viewer: CommandProcessor, file_service: Any, tmp_path: Path
    ) -> None:
        viewer.process_command(f"/view {tmp_path}")

        assert viewer.process_command("/close") == "Closed viewer (1 watcher(s) stopped)"
        assert viewer.viewed_path is None
        assert file_service.watcher_registry().list_watchers() == []

    def test_view_failure_is_reported(self, viewer: CommandProcessor, tmp_path: Path) -> None:
        result = viewer.process_command(f"/view {tmp_path / 'missing'}")

        assert result.startswith("[red]Error: Unable to read directory")
        assert viewer.viewed_path is None
