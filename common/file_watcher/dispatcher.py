"""Forward change events to the external transport."""

from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Callable, List, Tuple

from common.models import ChangeEvent
from common.utils import console, logger

FILES_CHANNEL = "files"


class Transport(ABC):
    """Delivers a payload to the listeners of a named channel."""

    @abstractmethod
    def send(self, channel: str, payload: dict[str, Any]) -> None:
        """Deliver ``payload`` at least once, preserving call order per sender."""
        pass


class InMemoryTransport(Transport):
    """Keeps every sent payload and forwards it to subscribers."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, dict[str, Any]]] = []
        self._subscribers: List[Callable[[str, dict[str, Any]], None]] = []
        self._lock = Lock()

    def subscribe(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def send(self, channel: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self.sent.append((channel, payload))
            subscribers = list(self._subscribers)

        for callback in subscribers:
            callback(channel, payload)

    def payloads(self, channel: str = FILES_CHANNEL) -> List[dict[str, Any]]:
        with self._lock:
            return [payload for sent_channel, payload in self.sent if sent_channel == channel]


class ConsoleTransport(Transport):
    """Prints one line per payload on the shared rich console."""

    def send(self, channel: str, payload: dict[str, Any]) -> None:
        kind = payload.get("eventKind", "?")
        console.print(
            f"[dim]{channel}[/dim] [bold cyan]{kind:<9}[/bold cyan] {payload.get('path', '')}"
        )


class Dispatcher:
    def __init__(self, transport: Transport, channel: str = FILES_CHANNEL) -> None:
        self.transport = transport
        self.channel = channel

    def dispatch(self, event: ChangeEvent) -> None:
        logger.debug(f"Dispatching {event.event_kind.value} {event.path} to {self.channel}")
        self.transport.send(self.channel, event.to_wire())
