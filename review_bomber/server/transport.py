"""Capabilities the coordinator needs from the outside world.

``Transport`` delivers opaque text to one connection. ``Scheduler`` runs a
callback once after a delay. The Socket.IO implementations are used by the
server; tests substitute in-memory fakes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

import flask_socketio

from review_bomber.utils.typing import ConnectionID

logger = logging.getLogger(__name__)


class Transport(ABC):
    @abstractmethod
    def send(self, connection_id: ConnectionID, text: str) -> None:
        """Deliver ``text`` to a single connection. May raise on a dead connection."""


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, seconds: float, callback: Callable, *args) -> None:
        """Run ``callback(*args)`` once, ``seconds`` from now."""


class SocketIOTransport(Transport):
    """Emits each snapshot as a ``state`` event to the connection's own room."""

    def __init__(self, socketio: flask_socketio.SocketIO, event_name: str = "state"):
        self.socketio = socketio
        self.event_name = event_name

    def send(self, connection_id: ConnectionID, text: str) -> None:
        self.socketio.emit(self.event_name, text, to=connection_id)


class SocketIOScheduler(Scheduler):
    """Single-shot delays on the Socket.IO server's own background tasks."""

    def __init__(self, socketio: flask_socketio.SocketIO):
        self.socketio = socketio

    def call_later(self, seconds: float, callback: Callable, *args) -> None:
        self.socketio.start_background_task(self._run_later, seconds, callback, *args)

    def _run_later(self, seconds: float, callback: Callable, *args) -> None:
        self.socketio.sleep(seconds)
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"[Timer] Scheduled callback {callback} failed: {e}")
