"""Round state, entry construction and tagline template resolution."""

from __future__ import annotations

import dataclasses
import logging
import random

from review_bomber.configurations import configuration_constants
from review_bomber.configurations.configuration_constants import (
    CritiqueIntensity, Phase)
from review_bomber.configurations.game_config import ThemePrompt
from review_bomber.server.session_registry import Session, SessionRegistry
from review_bomber.utils.typing import ConnectionID, PlayerName, Stars

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Entry:
    """One participant's resolved tagline plus the review and ratings attached to it."""

    author_index: int
    author_name: str
    text: str

    reviewer_name: str = ""
    critique: CritiqueIntensity | None = None
    review_text: str = ""

    ratings: dict[PlayerName, Stars] = dataclasses.field(default_factory=dict)

    @property
    def average_stars(self) -> float:
        if not self.ratings:
            return 0.0
        return sum(self.ratings.values()) / len(self.ratings)

    def to_record(self) -> dict:
        return {
            "author_index": self.author_index,
            "author_name": self.author_name,
            "text": self.text,
            "reviewer_name": self.reviewer_name,
            "critique": self.critique.name if self.critique is not None else "",
            "review_text": self.review_text,
            "ratings": dict(self.ratings),
            "average_stars": self.average_stars,
        }


@dataclasses.dataclass
class RoundState:
    phase: Phase = Phase.Lobby
    theme_prompt: ThemePrompt | None = None
    round_number: int = 0

    # Ordered snapshot of connection ids the current round is built from
    ordered_ids: list[ConnectionID] = dataclasses.field(default_factory=list)
    entries: list[Entry] = dataclasses.field(default_factory=list)
    current_entry_index: int = 0

    # Auto-advance counter, zeroed on every phase entry
    responses_received: int = 0

    # Identify which armed timer is still relevant
    theme_epoch: int = 0
    results_epoch: int = 0


def start_new_round(state: RoundState, registry: SessionRegistry) -> None:
    """Reset every session's per-round fields and take a fresh ordered snapshot."""
    registry.reset_round_fields()
    state.ordered_ids = [s.connection_id for s in registry.refresh_order()]
    state.entries = []
    state.current_entry_index = 0
    state.responses_received = 0
    logger.info(f"[Round] New round started with {len(state.ordered_ids)} sessions")


def pick_theme_prompt(
    theme_prompts: list[ThemePrompt],
    default: ThemePrompt,
    rng: random.Random,
) -> ThemePrompt:
    """Choose a theme for the round, falling back to the default when needed."""
    if not theme_prompts:
        return default

    chosen = rng.choice(theme_prompts)
    if not chosen.is_valid():
        logger.error(
            f"[Round] Prompt template missing {{A}} or {{B}}: '{chosen.prompt_template}'. "
            f"Using the default template."
        )
        chosen = ThemePrompt(theme=chosen.theme, prompt_template=default.prompt_template)

    logger.info(f"[Round] Selected theme: {chosen.theme}")
    return chosen


def resolve_template(template: str, a: str, b: str) -> str:
    """Substitute the two blanks into a tagline template.

    ``{A}``/``{B}`` tokens are replaced first, then the legacy `` A ``/`` B ``
    word tokens, then a trailing `` A``/`` B``. Each step works on the output
    of the previous one.
    """
    if not template:
        return f"{a} / {b}"

    t = template.replace(configuration_constants.PLACEHOLDER_A, a)
    t = t.replace(configuration_constants.PLACEHOLDER_B, b)

    # Only whole-word tokens, a plain replace("A", ...) would eat real words
    t = t.replace(" A ", f" {a} ")
    t = t.replace(" B ", f" {b} ")

    if t.endswith(" A"):
        t = f"{t[:-2]} {a}"
    if t.endswith(" B"):
        t = f"{t[:-2]} {b}"

    return t


def _fill_blank(value: str | None) -> str:
    if value is None or not value.strip():
        return configuration_constants.EMPTY_BLANK
    return value.strip()


def fallback_name(session: Session, index: int) -> str:
    return session.name if session.name else f"Player{index + 1}"


def build_entries(ordered_sessions: list[Session], template: str) -> list[Entry]:
    """Build one Entry per session, index-aligned with ``ordered_sessions``."""
    entries = []
    for i, session in enumerate(ordered_sessions):
        text = resolve_template(
            template, _fill_blank(session.blank_a), _fill_blank(session.blank_b)
        )
        entries.append(
            Entry(author_index=i, author_name=fallback_name(session, i), text=text)
        )

    logger.info(f"[Round] Built {len(entries)} entries from prompt submissions")
    return entries
