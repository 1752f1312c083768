"""Per-session state snapshots sent to clients after every transition.

Every field is always present. Fields that do not apply to the current phase
are empty strings, zero or -1; ``starButtons`` and ``resultsText`` are null
outside Vote and Results respectively.
"""

from __future__ import annotations

import dataclasses
import json

from review_bomber.configurations import configuration_constants
from review_bomber.configurations.configuration_constants import Phase
from review_bomber.configurations.game_config import GameConfig
from review_bomber.server import results_ranker, vote_tally
from review_bomber.server.round_builder import RoundState
from review_bomber.server.session_registry import Session


@dataclasses.dataclass
class Snapshot:
    scene: str
    is_first: bool
    theme: str
    prompt: str
    tagline_template: str
    assigned_entry_index: int
    assigned_tagline: str
    review_rating: int
    review_rating_label: str
    entry_index: int
    entry_count: int
    current_tagline: str
    current_review: str
    current_review_rating: str
    star_buttons: list[int] | None
    results_text: str | None

    def to_dict(self) -> dict:
        return {
            "scene": self.scene,
            "isFirst": self.is_first,
            "theme": self.theme,
            "prompt": self.prompt,
            "taglineTemplate": self.tagline_template,
            "assignedEntryIndex": self.assigned_entry_index,
            "assignedTagline": self.assigned_tagline,
            "reviewRating": self.review_rating,
            "reviewRatingLabel": self.review_rating_label,
            "entryIndex": self.entry_index,
            "entryCount": self.entry_count,
            "currentTagline": self.current_tagline,
            "currentReview": self.current_review,
            "currentReviewRating": self.current_review_rating,
            "starButtons": self.star_buttons,
            "resultsText": self.results_text,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def instruction_for(phase: Phase, theme: str, theme_duration_seconds: float) -> str:
    if phase == Phase.Theme:
        return configuration_constants.THEME_INSTRUCTION.format(
            theme=theme, seconds=theme_duration_seconds
        )
    return configuration_constants.PHASE_INSTRUCTIONS.get(phase, "")


def project_for(session: Session | None, state: RoundState, config: GameConfig) -> Snapshot:
    """Build the view of ``state`` for one session.

    Passing ``session=None`` gives the shared view used by the presentation
    layer, with all per-session fields left blank.
    """
    if state.theme_prompt is not None:
        theme = state.theme_prompt.theme
        template = state.theme_prompt.prompt_template
    else:
        theme = config.title
        template = config.default_prompt_template

    assigned_index = -1
    assigned_tagline = ""
    critique = configuration_constants.CritiqueIntensity.Average
    if session is not None:
        assigned_index = session.assigned_entry_index
        critique = session.critique
        assigned = vote_tally.current_entry(state.entries, assigned_index)
        if assigned is not None:
            assigned_tagline = assigned.text

    current = vote_tally.current_entry(state.entries, state.current_entry_index)
    current_critique = ""
    if current is not None and current.critique is not None:
        current_critique = current.critique.name

    return Snapshot(
        scene=state.phase.value,
        is_first=session.is_host if session is not None else False,
        theme=theme,
        prompt=instruction_for(state.phase, theme, config.theme_duration_seconds),
        tagline_template=template,
        assigned_entry_index=assigned_index,
        assigned_tagline=assigned_tagline,
        review_rating=critique.value,
        review_rating_label=critique.name,
        entry_index=state.current_entry_index,
        entry_count=len(state.entries),
        current_tagline=current.text if current is not None else "",
        current_review=current.review_text if current is not None else "",
        current_review_rating=current_critique,
        star_buttons=list(config.star_buttons) if state.phase == Phase.Vote else None,
        results_text=(
            results_ranker.build_results_summary(state.entries)
            if state.phase == Phase.Results
            else None
        ),
    )
