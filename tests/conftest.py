"""Pytest configuration and shared fixtures for the fileview tests."""

import time
from pathlib import Path
from typing import Any, Callable, Generator, List, Optional
from unittest.mock import Mock, patch

import pytest
from dependency_injector import providers

from common.containers import container
from common.file_watcher.dispatcher import Dispatcher, InMemoryTransport
from common.file_watcher.manager import WatchdogWatcherRegistry
from common.file_watcher.metadata import WatchPolicy
from common.file_watcher.translator import ChangeEventTranslator
from common.utils import logger


class FakeObserver:
    """Stands in for a watchdog observer; events are fed to the handler by hand."""

    def __init__(self) -> None:
        self.watches: List[Any] = []
        self.handler: Any = None
        self.alive = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler: Any, path: str, recursive: bool = False) -> Any:
        watch = (path, recursive)
        self.watches.append(watch)
        self.handler = handler
        return watch

    def unschedule(self, watch: Any) -> None:
        self.watches.remove(watch)

    def start(self) -> None:
        self.alive = True

    def stop(self) -> None:
        self.alive = False
        self.stopped = True

    def join(self, timeout: Optional[float] = None) -> None:
        self.joined = True

    def is_alive(self) -> bool:
        return self.alive


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def level_messages(messages: List[Any], level: str) -> List[str]:
    return [str(m) for m in messages if m.record["level"].name == level]


@pytest.fixture
def log_messages() -> Generator[List[Any], None, None]:
    """Capture loguru messages emitted during the test."""
    messages: List[Any] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fake_home(tmp_path: Path) -> Generator[Path, None, None]:
    """Point the home directory lookup at a temporary directory."""
    home = tmp_path / "home" / "u"
    home.mkdir(parents=True)
    with patch("common.paths.home_directory", return_value=str(home)):
        yield home


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def policy() -> WatchPolicy:
    return WatchPolicy(await_write_finish=False)


@pytest.fixture
def registry(
    transport: InMemoryTransport, policy: WatchPolicy
) -> Generator[WatchdogWatcherRegistry, None, None]:
    """Registry wired to an in-memory transport and fake observers."""
    watcher_registry = WatchdogWatcherRegistry(
        translator=ChangeEventTranslator(),
        dispatcher=Dispatcher(transport),
        policy=policy,
        observer_factory=FakeObserver,
    )
    yield watcher_registry
    watcher_registry.stop()


@pytest.fixture
def file_service(transport: InMemoryTransport) -> Generator[Any, None, None]:
    """The application container with an in-memory transport."""
    container.reset_singletons()
    with container.transport.override(providers.Object(transport)):
        yield container
        container.watcher_registry().stop()
    container.reset_singletons()


@pytest.fixture
def mock_console_print() -> Generator[Mock, None, None]:
    """Mock Rich console.print to capture output."""
    with patch('main.console.print') as mock_print:
        yield mock_print


@pytest.fixture
def mock_prompt() -> Generator[Mock, None, None]:
    """Mock prompt-toolkit prompt function."""
    with patch('main.prompt') as mock_prompt_func:
        yield mock_prompt_func


@pytest.fixture
def mock_display_banner() -> Generator[Mock, None, None]:
    """Mock the display_banner function."""
    with patch('main.display_banner') as mock_banner:
        yield mock_banner
