"""Events fed into the phase machine and the effects it hands back.

Inbound client messages are parsed here into events. Connection lifecycle
and timer fires are events too, so every state change flows through the same
serialized path.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import typing

from review_bomber.configurations.configuration_constants import MessageTypes, Phase
from review_bomber.utils.typing import ConnectionID

logger = logging.getLogger(__name__)


###########
# Events  #
###########


@dataclasses.dataclass(frozen=True)
class Connected:
    connection_id: ConnectionID


@dataclasses.dataclass(frozen=True)
class Disconnected:
    connection_id: ConnectionID


@dataclasses.dataclass(frozen=True)
class Join:
    connection_id: ConnectionID
    name: str | None


@dataclasses.dataclass(frozen=True)
class Start:
    connection_id: ConnectionID


@dataclasses.dataclass(frozen=True)
class Input:
    connection_id: ConnectionID
    text: str | None = None
    a: str | None = None
    b: str | None = None


@dataclasses.dataclass(frozen=True)
class Choice:
    connection_id: ConnectionID
    index: int = 0


@dataclasses.dataclass(frozen=True)
class ThemeTimerElapsed:
    epoch: int


@dataclasses.dataclass(frozen=True)
class ResultsTimerElapsed:
    epoch: int


###########
# Effects #
###########


@dataclasses.dataclass(frozen=True)
class Broadcast:
    """Send every connected session its own snapshot."""


@dataclasses.dataclass(frozen=True)
class SendState:
    connection_id: ConnectionID


@dataclasses.dataclass(frozen=True)
class ArmTimer:
    seconds: float
    event: ThemeTimerElapsed | ResultsTimerElapsed


@dataclasses.dataclass(frozen=True)
class FollowUp:
    """Process ``event`` right after the current one, inside the same lock."""

    event: typing.Any


@dataclasses.dataclass(frozen=True)
class PhaseChanged:
    previous: Phase
    current: Phase


@dataclasses.dataclass(frozen=True)
class RoundCompleted:
    round_number: int
    theme: str
    entries: tuple


##################
# Message parsing #
##################


def _optional_str(value) -> str | None:
    if value is None:
        return None
    return str(value)


def parse_message(connection_id: ConnectionID, raw) -> typing.Any | None:
    """Turn an inbound client message into an event.

    ``raw`` is the JSON text sent by the client, or an already-decoded dict.
    Returns None for anything malformed or of an unknown type.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(f"[Message] Ignoring non-JSON message from {connection_id}")
            return None
    else:
        data = raw

    if not isinstance(data, dict):
        logger.warning(f"[Message] Ignoring non-object message from {connection_id}: {data!r}")
        return None

    msg_type = data.get("type")

    if msg_type == MessageTypes.Join:
        name = _optional_str(data.get("name"))
        name = name.strip() if name is not None else None
        return Join(connection_id=connection_id, name=name or None)

    if msg_type == MessageTypes.Start:
        return Start(connection_id=connection_id)

    if msg_type == MessageTypes.Input:
        return Input(
            connection_id=connection_id,
            text=_optional_str(data.get("text")),
            a=_optional_str(data.get("a")),
            b=_optional_str(data.get("b")),
        )

    if msg_type == MessageTypes.Choice:
        index = data.get("index", 0)
        if index is None:
            index = 0
        try:
            index = int(index)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"[Message] Invalid choice index from {connection_id}: {index!r}")
            return None
        return Choice(connection_id=connection_id, index=index)

    logger.warning(f"[Message] Unknown message type from {connection_id}: {msg_type!r}")
    return None
