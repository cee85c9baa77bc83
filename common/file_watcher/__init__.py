"""File watcher system components."""

from .base import BaseWatcherRegistry
from .dispatcher import ConsoleTransport, Dispatcher, InMemoryTransport, Transport
from .manager import WatchdogWatcherRegistry
from .metadata import WatcherMetadata, WatchPolicy
from .translator import ChangeEventTranslator

__all__ = [
    "BaseWatcherRegistry",
    "ChangeEventTranslator",
    "ConsoleTransport",
    "Dispatcher",
    "InMemoryTransport",
    "Transport",
    "WatchdogWatcherRegistry",
    "WatcherMetadata",
    "WatchPolicy",
]
