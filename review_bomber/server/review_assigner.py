"""Review assignment: each session critiques the next session's entry with a random rating label."""

from __future__ import annotations

import logging
import random

from review_bomber.configurations import configuration_constants
from review_bomber.configurations.configuration_constants import CritiqueIntensity
from review_bomber.server.round_builder import Entry, fallback_name
from review_bomber.server.session_registry import Session

logger = logging.getLogger(__name__)


def assign_reviews(ordered_sessions: list[Session], rng: random.Random) -> bool:
    """Rotate review targets by one so nobody reviews their own entry.

    Session i reviews the entry authored by session (i + 1) % n and gets a
    random critique intensity. Returns False when fewer than two sessions are
    present, in which case nothing is assigned.
    """
    n = len(ordered_sessions)
    if n < 2:
        logger.warning(f"[Review] Need at least 2 players to assign reviews, have {n}")
        return False

    intensities = list(CritiqueIntensity)
    for i, session in enumerate(ordered_sessions):
        session.assigned_entry_index = (i + 1) % n
        session.critique = rng.choice(intensities)

    logger.info(f"[Review] Assigned review targets for {n} players")
    return True


def apply_reviews(ordered_sessions: list[Session], entries: list[Entry]) -> int:
    """Copy each session's review onto the entry it was assigned."""
    applied = 0
    for i, session in enumerate(ordered_sessions):
        if not 0 <= session.assigned_entry_index < len(entries):
            continue

        entry = entries[session.assigned_entry_index]
        entry.reviewer_name = fallback_name(session, i)
        entry.critique = session.critique
        review = (session.review_text or "").strip()
        entry.review_text = review if review else configuration_constants.NO_REVIEW_TEXT
        applied += 1

    logger.info(f"[Review] Applied {applied} reviews to {len(entries)} entries")
    return applied
