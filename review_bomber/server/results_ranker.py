"""Ranks entries by average stars and formats the Results text."""

from __future__ import annotations

import dataclasses

from review_bomber.configurations import configuration_constants
from review_bomber.server.round_builder import Entry


@dataclasses.dataclass(frozen=True)
class RankedEntry:
    position: int
    author_name: str
    average: float
    entry_index: int


def rank(entries: list[Entry], limit: int = configuration_constants.RESULTS_TOP_N) -> list[RankedEntry]:
    """Rank entries by average stars, highest first.

    Equal averages keep their original entry order (sorted() is stable).
    """
    ordered = sorted(
        enumerate(entries), key=lambda pair: pair[1].average_stars, reverse=True
    )
    return [
        RankedEntry(
            position=pos + 1,
            author_name=entry.author_name,
            average=entry.average_stars,
            entry_index=index,
        )
        for pos, (index, entry) in enumerate(ordered[:limit])
    ]


def format_results(ranked: list[RankedEntry]) -> str:
    if not ranked:
        return configuration_constants.NO_ENTRIES_TEXT
    return "\n".join(f"{r.position}) {r.author_name} - {r.average:.2f}" for r in ranked)


def build_results_summary(entries: list[Entry]) -> str:
    return format_results(rank(entries))
