"""Round recap export.

Writes one CSV per completed round to ``{data_dir}/{game_id}/round_{n}.csv``,
one row per entry, with the per-voter ratings flattened into
``ratings.<voter>`` columns.
"""

from __future__ import annotations

import logging
import os

import flatten_dict
import pandas as pd

from review_bomber.server.presentation import PresentationSink

logger = logging.getLogger(__name__)


class RoundRecapLogger(PresentationSink):
    def __init__(self, data_dir: str = "data", game_id: str = "review_bomber", **kwargs):
        self.output_dir = os.path.join(data_dir, game_id)
        os.makedirs(self.output_dir, exist_ok=True)
        logger.info(f"Round recaps will be saved to {self.output_dir}/")

    def filepath_for(self, round_number: int) -> str:
        return os.path.join(self.output_dir, f"round_{round_number}.csv")

    def on_round_complete(self, round_number, theme, entries):
        if not entries:
            logger.info(f"No entries to save for round {round_number}")
            return

        rows = []
        for entry in entries:
            row = flatten_dict.flatten(entry.to_record(), reducer="dot")
            row["round_number"] = round_number
            row["theme"] = theme
            rows.append(row)

        df = pd.DataFrame(rows)
        df["timestamp"] = pd.to_datetime("now")

        filename = self.filepath_for(round_number)
        logger.info(f"Saving {filename}")
        try:
            df.to_csv(filename, index=False)
        except Exception as e:
            logger.error(f"Failed to write round recap to {filename}: {e}")
