from __future__ import annotations

import dataclasses
from enum import Enum


class Phase(Enum):
    """Stages of the round cycle.

    Lobby is only visited once, at process start. After that the cycle is
    Theme -> Prompt -> Review -> Vote -> Results -> Theme -> ...
    """
    Lobby = "Lobby"
    Theme = "Theme"
    Prompt = "Prompt"
    Review = "Review"
    Vote = "Vote"
    Results = "Results"


class CritiqueIntensity(Enum):
    """Rating a reviewer is asked to write their review in the style of.

    The integer values are part of the outbound snapshot (``reviewRating``).
    """
    Good = 0
    Average = 1
    Bad = 2


@dataclasses.dataclass(frozen=True)
class MessageTypes:
    Join = "join"
    Start = "start"
    Input = "input"
    Choice = "choice"


GAME_TITLE = "Review Bomber"

DEFAULT_THEME = "Default Theme"
DEFAULT_PROMPT_TEMPLATE = "Don't let your {A} ever cause {B} again!"

PLACEHOLDER_A = "{A}"
PLACEHOLDER_B = "{B}"

DEFAULT_STAR_BUTTONS = (1, 2, 3, 4, 5)
DEFAULT_THEME_DURATION_S = 10.0

EMPTY_BLANK = "____"
NO_REVIEW_TEXT = "(no review submitted)"
UNNAMED_VOTER = "(unnamed)"
NO_ENTRIES_TEXT = "No entries."

RESULTS_TOP_N = 3

PHASE_INSTRUCTIONS = {
    Phase.Lobby: "Enter your name to join.",
    Phase.Prompt: "Fill in the two blanks for the tagline.",
    Phase.Review: "Write a review that matches your assigned rating.",
    Phase.Vote: "Rate the current entry 1-5.",
    Phase.Results: "Results",
}

THEME_INSTRUCTION = "Theme: {theme}\nNext prompt in {seconds:.0f} seconds..."
