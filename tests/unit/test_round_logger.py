"""Unit tests for the per-round CSV recap."""

from __future__ import annotations

import pandas as pd

from review_bomber.configurations.configuration_constants import CritiqueIntensity
from review_bomber.server.round_builder import Entry
from review_bomber.server.round_logger import RoundRecapLogger


def test_round_is_written_one_row_per_entry(tmp_path):
    recap = RoundRecapLogger(data_dir=str(tmp_path), game_id="test_game")
    entries = (
        Entry(0, "alice", "tagline zero", reviewer_name="bob",
              critique=CritiqueIntensity.Good, review_text="loved it",
              ratings={"alice": 3, "bob": 5}),
        Entry(1, "bob", "tagline one", ratings={"alice": 1}),
    )

    recap.on_round_complete(2, "Cars", entries)

    df = pd.read_csv(recap.filepath_for(2))
    assert len(df) == 2
    assert list(df["author_name"]) == ["alice", "bob"]
    assert list(df["round_number"]) == [2, 2]
    assert df.loc[0, "ratings.bob"] == 5
    assert df.loc[0, "critique"] == "Good"
    assert df.loc[0, "average_stars"] == 4.0
    assert "timestamp" in df.columns


def test_empty_round_writes_nothing(tmp_path):
    recap = RoundRecapLogger(data_dir=str(tmp_path), game_id="test_game")
    recap.on_round_complete(1, "Cars", ())
    assert not (tmp_path / "test_game" / "round_1.csv").exists()
