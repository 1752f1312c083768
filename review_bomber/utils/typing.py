from __future__ import annotations

import typing

ConnectionID = typing.Hashable
PlayerName = str
Stars = int
