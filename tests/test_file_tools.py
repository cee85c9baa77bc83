import asyncio
import json
import time
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from common.errors import DirectoryReadFailure
from common.file_watcher.dispatcher import InMemoryTransport
from common.models import BaseCommand
from tools import file_viewer
from tools.file_tools import commands_by_name, file_tools, invoke


class TestCommandSchema:

    def test_every_command_is_registered_by_name(self) -> None:
        assert all(isinstance(command, BaseCommand) for command in file_tools)
        assert set(commands_by_name) == {
            "get_files",
            "get_file_stats",
            "start_watching",
            "add_watching",
            "stop_watching",
            "list_watching",
            "read_json_file",
            "save_to_temporary_file",
            "copy_file",
            "resolve_home_directory",
            "shorten_home_directory",
        }

    def test_parameters_are_published_as_json_schema(self) -> None:
        schema = commands_by_name["start_watching"].command_params

        assert "title" not in schema
        assert schema["required"] == ["requester_id", "target"]
        assert set(schema["properties"]) == {"requester_id", "target"}

    def test_optional_parameter_is_not_required(self) -> None:
        schema = commands_by_name["stop_watching"].command_params

        assert "required" not in schema

    def test_description_comes_from_docstring(self) -> None:
        assert commands_by_name["copy_file"].description == "Copy one file to another location."

    def test_schema_is_json_serializable(self) -> None:
        for command in file_tools:
            json.dumps(command.model_dump())


class TestInvoke:

    def test_unknown_command(self) -> None:
        with pytest.raises(KeyError):
            invoke("format_disk", {})

    def test_invalid_payload(self) -> None:
        with pytest.raises(ValidationError):
            invoke("get_file_stats", {})

    def test_stats_payload(self, tmp_path: Path) -> None:
        result = invoke("get_file_stats", {"path": str(tmp_path)})

        assert result["isDirectory"] is True
        assert result["path"] == str(tmp_path)

    def test_async_listing(self, tmp_path: Path, file_service: Any) -> None:
        (tmp_path / "a.txt").write_text("a")

        result = asyncio.run(invoke("get_files", {"path": str(tmp_path)}))

        assert result["path"] == str(tmp_path)
        assert [entry["baseName"] for entry in result["entries"]] == ["a.txt"]

    def test_home_directory_helpers(self, fake_home: Path) -> None:
        resolved = invoke("resolve_home_directory", {"path": "~/docs"})

        assert resolved == str(fake_home / "docs")
        assert invoke("shorten_home_directory", {"path": resolved}) == "~/docs"

    def test_watch_lifecycle(
        self, tmp_path: Path, file_service: Any, transport: InMemoryTransport
    ) -> None:
        other = tmp_path / "other"
        other.mkdir()

        started = invoke("start_watching", {"requester_id": "ui", "target": str(tmp_path)})
        added = invoke("add_watching", {"requester_id": "ui", "target": [str(other)]})
        watching = invoke("list_watching")

        assert started["requesterId"] == "ui"
        assert started["isActive"] is True
        assert added is True
        assert watching[0]["targets"] == [str(tmp_path), str(other)]
        assert [p["eventKind"] for p in transport.payloads("files")] == ["ready", "ready"]
        assert invoke("stop_watching", {"requester_id": "ui"}) == 1
        assert invoke("list_watching") == []

    def test_add_without_session(self, tmp_path: Path, file_service: Any) -> None:
        assert invoke("add_watching", {"requester_id": "ghost", "target": str(tmp_path)}) is False

    def test_file_commands(self, tmp_path: Path) -> None:
        src = tmp_path / "data.json"
        src.write_text('{"ok": true}')
        dest = tmp_path / "copy.json"

        invoke("copy_file", {"src": str(src), "dest": str(dest)})

        assert invoke("read_json_file", {"path": str(dest)}) == {"ok": True}
        saved = asyncio.run(invoke("save_to_temporary_file", {"suffix": ".log", "data": "x"}))
        assert Path(saved).read_text() == "x"


class TestFileViewer:

    def test_viewing_lists_and_watches_direct_children(
        self, tmp_path: Path, file_service: Any
    ) -> None:
        (tmp_path / "a.txt").write_text("a")

        listing = asyncio.run(file_viewer.get_viewed_files(str(tmp_path), minimum_duration=0))

        assert [entry.base_name for entry in listing.entries] == ["a.txt"]
        watcher = file_service.watcher_registry().get_watcher(file_viewer.REQUESTER_ID)
        assert watcher.targets == [str(tmp_path / "*")]

    def test_viewing_another_directory_replaces_watch(
        self, tmp_path: Path, file_service: Any
    ) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()

        asyncio.run(file_viewer.get_viewed_files(str(first), minimum_duration=0))
        asyncio.run(file_viewer.get_viewed_files(str(second), minimum_duration=0))

        watchers = file_service.watcher_registry().list_watchers()
        assert [w.targets for w in watchers] == [[str(second / "*")]]

    def test_expanding_folder_adds_to_watch(self, tmp_path: Path, file_service: Any) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "inner.txt").write_text("x")

        asyncio.run(file_viewer.get_viewed_files(str(tmp_path), minimum_duration=0))
        listing = asyncio.run(file_viewer.expand_folder(str(sub)))

        assert [entry.base_name for entry in listing.entries] == ["inner.txt"]
        watcher = file_service.watcher_registry().get_watcher(file_viewer.REQUESTER_ID)
        assert watcher.targets == [str(tmp_path / "*"), str(sub / "*")]

    def test_listing_waits_for_minimum_duration(self, tmp_path: Path, file_service: Any) -> None:
        loop = asyncio.new_event_loop()
        try:
            started = loop.time()
            loop.run_until_complete(
                file_viewer.list_with_minimum_duration(str(tmp_path), minimum_duration=0.2)
            )
            elapsed = loop.time() - started
        finally:
            loop.close()

        assert elapsed >= 0.19

    def test_failing_listing_does_not_wait_for_delay(
        self, tmp_path: Path, file_service: Any
    ) -> None:
        started = time.monotonic()

        with pytest.raises(DirectoryReadFailure):
            asyncio.run(
                file_viewer.list_with_minimum_duration(
                    str(tmp_path / "missing"), minimum_duration=5.0
                )
            )

        assert time.monotonic() - started < 2.0

    def test_parent_directory(self, fake_home: Path) -> None:
        assert file_viewer.parent_directory("~/docs/") == str(fake_home)
        assert file_viewer.parent_directory("/") == "/"

    def test_close_viewer(self, tmp_path: Path, file_service: Any) -> None:
        asyncio.run(file_viewer.get_viewed_files(str(tmp_path), minimum_duration=0))

        assert file_viewer.close_viewer() == 1
        assert file_viewer.close_viewer() == 0
