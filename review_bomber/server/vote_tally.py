"""Sequential voting: every connected session rates one entry at a time."""

from __future__ import annotations

import logging

from review_bomber.configurations import configuration_constants
from review_bomber.server.round_builder import Entry, RoundState
from review_bomber.server.session_registry import Session

logger = logging.getLogger(__name__)


def current_entry(entries: list[Entry], index: int) -> Entry | None:
    if 0 <= index < len(entries):
        return entries[index]
    return None


def cast_vote(
    session: Session,
    entries: list[Entry],
    current_index: int,
    star_buttons: list[int],
    button_index: int,
) -> bool:
    """Record ``session``'s rating of the current entry.

    Returns False without touching anything if there is no current entry or
    the session already voted on it.
    """
    entry = current_entry(entries, current_index)
    if entry is None or session.has_voted_this_entry:
        return False

    button_index = min(max(button_index, 0), len(star_buttons) - 1)
    stars = star_buttons[button_index]
    voter = session.name or configuration_constants.UNNAMED_VOTER

    # Keyed by display name, so duplicate names overwrite each other
    entry.ratings[voter] = stars
    session.has_voted_this_entry = True
    logger.info(f"[Vote] {voter} gave entry {current_index} {stars} stars")
    return True


def reset_entry_votes(sessions) -> None:
    for session in sessions:
        session.has_voted_this_entry = False


def advance_vote_target(state: RoundState, sessions) -> bool:
    """Move to the next entry. Returns False once every entry has been voted on."""
    state.current_entry_index += 1
    state.responses_received = 0

    if state.current_entry_index >= len(state.entries):
        logger.info("[Vote] All entries voted on")
        return False

    reset_entry_votes(sessions)
    logger.info(
        f"[Vote] Advancing to entry {state.current_entry_index}/{len(state.entries)}"
    )
    return True
