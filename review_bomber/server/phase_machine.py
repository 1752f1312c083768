"""Phase state machine for a Review Bomber round.

The machine owns the session registry and the round state. ``transition``
applies one event and returns the effects (broadcasts, timers, notifications)
that the caller must run once the transition has been committed. It performs
no I/O and is not thread-safe; the RoundCoordinator serializes calls.

    Lobby --start--> Theme --timer--> Prompt --all--> Review --all--> Vote
                       ^                                               |
                       +---------------- Results <--- entries done ----+
"""

from __future__ import annotations

import logging
import random

from review_bomber.configurations.configuration_constants import Phase
from review_bomber.configurations.game_config import GameConfig
from review_bomber.server import (events, review_assigner, round_builder,
                                  vote_tally)
from review_bomber.server.round_builder import RoundState
from review_bomber.server.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class PhaseMachine:
    def __init__(self, config: GameConfig, rng: random.Random | None = None):
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)
        self.registry = SessionRegistry()
        self.state = RoundState()

        self._handlers = {
            events.Connected: self._on_connected,
            events.Disconnected: self._on_disconnected,
            events.Join: self._on_join,
            events.Start: self._on_start,
            events.Input: self._on_input,
            events.Choice: self._on_choice,
            events.ThemeTimerElapsed: self._on_theme_timer,
            events.ResultsTimerElapsed: self._on_results_timer,
        }

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def transition(self, event) -> list:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"[Phase] No handler for event {event!r}")
            return []
        return handler(event)

    def threshold_reached(self) -> bool:
        """True when every currently connected session has responded."""
        connected = len(self.registry)
        return connected > 0 and self.state.responses_received >= connected

    ###################
    # Event handlers  #
    ###################

    def _on_connected(self, event: events.Connected) -> list:
        self.registry.add(event.connection_id)
        self._snapshot_order()
        return [events.SendState(event.connection_id)]

    def _on_disconnected(self, event: events.Disconnected) -> list:
        session = self.registry.remove(event.connection_id)
        if session is None:
            return []
        self._snapshot_order()

        # A departed session's response no longer counts toward the threshold
        if self._was_counted(session) and self.state.responses_received > 0:
            self.state.responses_received -= 1

        # Fewer sessions can satisfy a threshold that was waiting on this one
        effects = self._advance_if_complete()
        effects.append(events.Broadcast())
        return effects

    def _on_join(self, event: events.Join) -> list:
        if self.registry.set_name(event.connection_id, event.name) is None:
            return []
        self._snapshot_order()
        logger.info(f"[Phase] Join from {event.name or '(unnamed)'}")
        return [events.Broadcast()]

    def _on_start(self, event: events.Start) -> list:
        session = self.registry.get(event.connection_id)
        if session is None:
            return []

        effects = []
        if session.is_host and self.state.phase == Phase.Lobby:
            round_builder.start_new_round(self.state, self.registry)
            effects.extend(self._enter_theme())
        else:
            logger.info(
                f"[Phase] Ignoring start from {event.connection_id} "
                f"(host={session.is_host}, phase={self.state.phase.value})"
            )

        effects.append(events.Broadcast())
        return effects

    def _on_input(self, event: events.Input) -> list:
        session = self.registry.get(event.connection_id)
        if session is None:
            return []

        if self.state.phase == Phase.Prompt:
            session.blank_a = event.a or ""
            session.blank_b = event.b or ""
        elif self.state.phase == Phase.Review:
            session.review_text = event.text or ""
        else:
            logger.info(f"[Phase] Ignoring input during {self.state.phase.value}")
            return [events.Broadcast()]

        # Resubmitting replaces the text but only counts once
        if not session.has_submitted:
            session.has_submitted = True
            self.state.responses_received += 1

        logger.info(
            f"[Phase] {self.state.phase.value} response "
            f"{self.state.responses_received}/{len(self.registry)} from "
            f"{session.name or '(unnamed)'}"
        )

        effects = self._advance_if_complete()
        effects.append(events.Broadcast())
        return effects

    def _on_choice(self, event: events.Choice) -> list:
        session = self.registry.get(event.connection_id)
        if session is None:
            return []

        if self.state.phase != Phase.Vote:
            return [events.Broadcast()]

        accepted = vote_tally.cast_vote(
            session,
            self.state.entries,
            self.state.current_entry_index,
            self.config.star_buttons,
            event.index,
        )
        if accepted:
            self.state.responses_received += 1

        effects = self._advance_if_complete()
        effects.append(events.Broadcast())
        return effects

    def _on_theme_timer(self, event: events.ThemeTimerElapsed) -> list:
        if self.state.phase != Phase.Theme or event.epoch != self.state.theme_epoch:
            logger.info(f"[Timer] Stale theme timer (epoch {event.epoch}), ignoring")
            return []

        logger.info("[Timer] Theme timer finished, advancing to Prompt")
        round_builder.start_new_round(self.state, self.registry)
        effects = self._enter(Phase.Prompt)
        effects.append(events.Broadcast())
        return effects

    def _on_results_timer(self, event: events.ResultsTimerElapsed) -> list:
        if self.state.phase != Phase.Results or event.epoch != self.state.results_epoch:
            logger.info(f"[Timer] Stale results timer (epoch {event.epoch}), ignoring")
            return []

        effects = self._enter_theme()
        effects.append(events.Broadcast())
        return effects

    ###############
    # Transitions #
    ###############

    def _advance_if_complete(self) -> list:
        if self.state.phase not in (Phase.Prompt, Phase.Review, Phase.Vote):
            return []
        if not self.threshold_reached():
            return []

        if self.state.phase == Phase.Prompt:
            return self._finish_prompt()
        if self.state.phase == Phase.Review:
            return self._finish_review()
        return self._finish_vote_entry()

    def _enter(self, phase: Phase) -> list:
        previous = self.state.phase
        self.state.phase = phase
        self.state.responses_received = 0
        for session in self.registry:
            session.has_submitted = False
        logger.info(f"[Phase] Transition {previous.value} -> {phase.value}")
        return [events.PhaseChanged(previous=previous, current=phase)]

    def _enter_theme(self) -> list:
        self.state.theme_prompt = round_builder.pick_theme_prompt(
            self.config.theme_prompts, self.config.default_theme_prompt(), self.rng
        )
        self.state.round_number += 1
        self.state.theme_epoch += 1
        effects = self._enter(Phase.Theme)
        effects.append(
            events.ArmTimer(
                seconds=self.config.theme_duration_seconds,
                event=events.ThemeTimerElapsed(epoch=self.state.theme_epoch),
            )
        )
        return effects

    def _finish_prompt(self) -> list:
        ordered = self._snapshot_order()
        self.state.entries = round_builder.build_entries(
            ordered, self._current_template()
        )
        review_assigner.assign_reviews(ordered, self.rng)
        return self._enter(Phase.Review)

    def _finish_review(self) -> list:
        review_assigner.apply_reviews(self._snapshot_order(), self.state.entries)
        if not self.state.entries:
            logger.warning("[Phase] No entries to vote on, skipping to Results")
            return self._enter_results()

        effects = self._enter(Phase.Vote)
        self.state.current_entry_index = 0
        vote_tally.reset_entry_votes(self.registry)
        return effects

    def _finish_vote_entry(self) -> list:
        if vote_tally.advance_vote_target(self.state, self.registry):
            return []
        return self._enter_results()

    def _enter_results(self) -> list:
        effects = self._enter(Phase.Results)
        self.state.results_epoch += 1
        effects.append(
            events.RoundCompleted(
                round_number=self.state.round_number,
                theme=self.state.theme_prompt.theme if self.state.theme_prompt else "",
                entries=tuple(self.state.entries),
            )
        )

        timer_event = events.ResultsTimerElapsed(epoch=self.state.results_epoch)
        if self.config.results_duration_seconds > 0:
            effects.append(
                events.ArmTimer(seconds=self.config.results_duration_seconds, event=timer_event)
            )
        else:
            effects.append(events.FollowUp(timer_event))
        return effects

    ###########
    # Helpers #
    ###########

    def _was_counted(self, session) -> bool:
        if self.state.phase in (Phase.Prompt, Phase.Review):
            return session.has_submitted
        if self.state.phase == Phase.Vote:
            return session.has_voted_this_entry
        return False

    def _snapshot_order(self):
        ordered = self.registry.refresh_order()
        self.state.ordered_ids = [s.connection_id for s in ordered]
        return ordered

    def _current_template(self) -> str:
        if self.state.theme_prompt is not None:
            return self.state.theme_prompt.prompt_template
        return self.config.default_prompt_template
