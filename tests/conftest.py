"""
Shared pytest fixtures for review_bomber tests.

Provides:
- config: a GameConfig with a short theme timer and a fixed seed
- FakeTransport / FakeScheduler: in-memory stand-ins for Socket.IO
- coordinator: a RoundCoordinator wired to the fakes

None of these start a server; timers only fire when a test calls
``FakeScheduler.fire_next()``.
"""

from __future__ import annotations

import json
import random

import pytest

from review_bomber.configurations.game_config import GameConfig
from review_bomber.server.presentation import PresentationSink
from review_bomber.server.round_coordinator import RoundCoordinator
from review_bomber.server.transport import Scheduler, Transport


class FakeTransport(Transport):
    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    def send(self, connection_id, text):
        if connection_id in self.failing:
            raise ConnectionError(f"{connection_id} is gone")
        self.sent.append((connection_id, json.loads(text)))

    def last_for(self, connection_id):
        for cid, payload in reversed(self.sent):
            if cid == connection_id:
                return payload
        return None

    def clear(self):
        self.sent = []


class FakeScheduler(Scheduler):
    def __init__(self):
        self.pending = []

    def call_later(self, seconds, callback, *args):
        self.pending.append((seconds, callback, args))

    def fire_next(self):
        seconds, callback, args = self.pending.pop(0)
        callback(*args)
        return seconds


class RecordingSink(PresentationSink):
    def __init__(self):
        self.phase_changes = []
        self.rounds = []

    def on_phase_change(self, previous, current, snapshot):
        self.phase_changes.append((previous, current, snapshot))

    def on_round_complete(self, round_number, theme, entries):
        self.rounds.append((round_number, theme, entries))


@pytest.fixture
def config():
    return GameConfig().game(seed=0).timing(theme_duration_seconds=1)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def coordinator(config, transport, scheduler, sink):
    return RoundCoordinator(
        config, transport=transport, scheduler=scheduler, sink=sink, rng=random.Random(0)
    )


def join_players(coordinator, names):
    """Connect and name one session per entry in ``names``; returns connection ids."""
    connection_ids = []
    for i, name in enumerate(names):
        cid = f"sid-{i}"
        coordinator.on_connect(cid)
        coordinator.on_message(cid, json.dumps({"type": "join", "name": name}))
        connection_ids.append(cid)
    return connection_ids


@pytest.fixture
def join(coordinator):
    return lambda names: join_players(coordinator, names)


@pytest.fixture
def transport_factory():
    return FakeTransport
