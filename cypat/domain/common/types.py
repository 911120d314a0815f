"""Shared value types used across domain sub-packages.

These are thin wrappers that make function signatures self-documenting
and prevent primitive obsession (passing raw ints everywhere).
"""

from __future__ import annotations

from typing import NewType

# Identifiers
ScoreId = NewType("ScoreId", int)

# Score values are signed 32-bit integers
ScoreValue = NewType("ScoreValue", int)

SCORE_VALUE_MIN = -(2**31)
SCORE_VALUE_MAX = 2**31 - 1
