"""Single-writer boundary around the phase machine.

Socket handlers run on many greenlets and the phase timers fire on their own.
All of them go through ``RoundCoordinator.handle``, which holds one semaphore
while the machine transitions and snapshots are projected. Sends and sink
callbacks happen after the lock is released.
"""

from __future__ import annotations

import collections
import logging
import random

import eventlet

from review_bomber.configurations.game_config import GameConfig
from review_bomber.server import events, view_projector
from review_bomber.server.phase_machine import PhaseMachine
from review_bomber.server.presentation import PresentationSink
from review_bomber.server.transport import Scheduler, Transport
from review_bomber.utils.typing import ConnectionID

logger = logging.getLogger(__name__)


class RoundCoordinator:
    def __init__(
        self,
        config: GameConfig,
        transport: Transport,
        scheduler: Scheduler,
        sink: PresentationSink | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.transport = transport
        self.scheduler = scheduler
        self.sink = sink or PresentationSink()
        self.machine = PhaseMachine(config, rng=rng)
        self._lock = eventlet.semaphore.Semaphore()

    ##################
    # Event sources  #
    ##################

    def on_connect(self, connection_id: ConnectionID) -> None:
        self.handle(events.Connected(connection_id))

    def on_disconnect(self, connection_id: ConnectionID) -> None:
        self.handle(events.Disconnected(connection_id))

    def on_message(self, connection_id: ConnectionID, raw) -> None:
        event = events.parse_message(connection_id, raw)
        if event is None:
            return
        self.handle(event)

    def handle(self, event) -> None:
        outbox: list[tuple[ConnectionID, str]] = []
        notifications = []

        with self._lock:
            pending = collections.deque([event])
            while pending:
                for effect in self.machine.transition(pending.popleft()):
                    if isinstance(effect, events.Broadcast):
                        outbox.extend(self._project_all())
                    elif isinstance(effect, events.SendState):
                        outbox.extend(self._project_one(effect.connection_id))
                    elif isinstance(effect, events.ArmTimer):
                        self._arm_timer(effect)
                    elif isinstance(effect, events.FollowUp):
                        pending.append(effect.event)
                    elif isinstance(effect, events.PhaseChanged):
                        shared = view_projector.project_for(
                            None, self.machine.state, self.config
                        )
                        notifications.append((effect, shared))
                    elif isinstance(effect, events.RoundCompleted):
                        notifications.append((effect, None))

        self._deliver(outbox)
        self._notify(notifications)

    def status(self) -> dict:
        with self._lock:
            return {
                "phase": self.machine.state.phase.value,
                "round": self.machine.state.round_number,
                "sessions": len(self.machine.registry),
            }

    ############
    # Effects  #
    ############

    def _project_all(self) -> list[tuple[ConnectionID, str]]:
        return [
            (session.connection_id, self._project(session))
            for session in self.machine.registry
        ]

    def _project_one(self, connection_id: ConnectionID) -> list[tuple[ConnectionID, str]]:
        session = self.machine.registry.get(connection_id)
        if session is None:
            return []
        return [(connection_id, self._project(session))]

    def _project(self, session) -> str:
        return view_projector.project_for(session, self.machine.state, self.config).to_json()

    def _arm_timer(self, effect: events.ArmTimer) -> None:
        logger.info(f"[Timer] Armed {type(effect.event).__name__} for {effect.seconds}s")
        self.scheduler.call_later(effect.seconds, self.handle, effect.event)

    def _deliver(self, outbox: list[tuple[ConnectionID, str]]) -> None:
        for connection_id, text in outbox:
            try:
                self.transport.send(connection_id, text)
            except Exception as e:
                # Sessions are only reaped by the disconnect event
                logger.warning(f"[Broadcast] Send to {connection_id} failed: {e}")

    def _notify(self, notifications) -> None:
        for effect, snapshot in notifications:
            try:
                if isinstance(effect, events.PhaseChanged):
                    self.sink.on_phase_change(effect.previous, effect.current, snapshot)
                else:
                    self.sink.on_round_complete(
                        effect.round_number, effect.theme, effect.entries
                    )
            except Exception as e:
                logger.error(f"[Screen] Presentation callback failed for {effect}: {e}")
