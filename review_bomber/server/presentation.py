"""Hooks for the shared screen, notified after each phase change and completed round."""

from __future__ import annotations

import logging

from review_bomber.configurations.configuration_constants import Phase
from review_bomber.server import results_ranker

logger = logging.getLogger(__name__)


class PresentationSink:
    """Base callback interface for the shared screen.

    The on-screen presentation (scene activation, text binding, audio) lives
    outside this package. It subscribes through these hooks, which run after
    the transition has been committed and outside the coordinator's lock.
    """

    def __init__(self, **kwargs) -> None:
        pass

    def on_phase_change(self, previous: Phase, current: Phase, snapshot) -> None:
        pass

    def on_round_complete(self, round_number: int, theme: str, entries: tuple) -> None:
        pass


class MultiSink(PresentationSink):
    """Fans every hook out to several sinks."""

    def __init__(self, sinks: list[PresentationSink], **kwargs) -> None:
        self.sinks = list(sinks)

    def on_phase_change(self, previous, current, snapshot):
        for sink in self.sinks:
            sink.on_phase_change(previous, current, snapshot)

    def on_round_complete(self, round_number, theme, entries):
        for sink in self.sinks:
            sink.on_round_complete(round_number, theme, entries)


class LoggingSink(PresentationSink):
    def on_phase_change(self, previous, current, snapshot):
        logger.info(f"[Screen] {previous.value} -> {current.value}: {snapshot.prompt!r}")

    def on_round_complete(self, round_number, theme, entries):
        summary = results_ranker.build_results_summary(list(entries))
        logger.info(f"[Screen] Round {round_number} ({theme}) results:\n{summary}")
