"""Session registry for connected participants.

One Session exists per open connection. The registry owns host assignment and
the deterministic ordering of sessions that rounds are built from.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging

from review_bomber.configurations.configuration_constants import CritiqueIntensity
from review_bomber.utils.typing import ConnectionID

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Session:
    """Server-side state for one connected participant."""

    connection_id: ConnectionID
    order_key: int
    name: str | None = None
    is_host: bool = False

    # Prompt phase
    blank_a: str = ""
    blank_b: str = ""

    # Review phase
    assigned_entry_index: int = -1
    critique: CritiqueIntensity = CritiqueIntensity.Average
    review_text: str = ""

    # Vote phase
    has_voted_this_entry: bool = False

    # Set once the session's response for the current phase was counted
    has_submitted: bool = False

    @property
    def display_name(self) -> str:
        return self.name or ""

    def reset_round_fields(self) -> None:
        self.blank_a = ""
        self.blank_b = ""
        self.assigned_entry_index = -1
        self.critique = CritiqueIntensity.Average
        self.review_text = ""
        self.has_voted_this_entry = False
        self.has_submitted = False


class SessionRegistry:
    """Maps connection identity to Session.

    Not thread-safe on its own; the RoundCoordinator is the only writer and
    serializes all access.
    """

    def __init__(self):
        self._sessions: dict[ConnectionID, Session] = {}
        self._ordered: list[Session] = []
        self._order_keys = itertools.count()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, connection_id: ConnectionID) -> bool:
        return connection_id in self._sessions

    def __iter__(self):
        return iter(list(self._sessions.values()))

    def get(self, connection_id: ConnectionID) -> Session | None:
        return self._sessions.get(connection_id)

    def host(self) -> Session | None:
        for session in self._sessions.values():
            if session.is_host:
                return session
        return None

    def add(self, connection_id: ConnectionID) -> Session:
        """Register a new connection, making it host if no one holds the flag."""
        existing = self._sessions.get(connection_id)
        if existing is not None:
            logger.warning(f"[Registry] Connection {connection_id} is already registered")
            return existing

        session = Session(connection_id=connection_id, order_key=next(self._order_keys))
        if self.host() is None:
            session.is_host = True
            logger.info(f"[Registry] Host assigned to {connection_id}")

        self._sessions[connection_id] = session
        self.refresh_order()
        logger.info(f"[Registry] Added {connection_id}. Connected: {len(self._sessions)}")
        return session

    def remove(self, connection_id: ConnectionID) -> Session | None:
        """Drop a connection. A departing host hands the flag to a remaining session."""
        session = self._sessions.pop(connection_id, None)
        if session is None:
            logger.warning(f"[Registry] Tried to remove unknown connection {connection_id}")
            return None

        if session.is_host:
            session.is_host = False
            successor = next(iter(self._sessions.values()), None)
            if successor is not None:
                successor.is_host = True
                logger.info(
                    f"[Registry] Host {connection_id} left, host transferred to "
                    f"{successor.connection_id}"
                )
            else:
                logger.info(f"[Registry] Host {connection_id} left, registry is empty")

        self.refresh_order()
        logger.info(f"[Registry] Removed {connection_id}. Connected: {len(self._sessions)}")
        return session

    def set_name(self, connection_id: ConnectionID, name: str | None) -> Session | None:
        session = self._sessions.get(connection_id)
        if session is None:
            return None
        session.name = name
        self.refresh_order()
        return session

    def refresh_order(self) -> list[Session]:
        # Name ascending, then connection order as a stable tie-break
        self._ordered = sorted(
            self._sessions.values(),
            key=lambda s: (s.display_name, s.order_key),
        )
        return list(self._ordered)

    def ordered_snapshot(self) -> list[Session]:
        return list(self._ordered)

    def reset_round_fields(self) -> None:
        for session in self._sessions.values():
            session.reset_round_fields()
