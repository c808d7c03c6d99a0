from __future__ import annotations

from enum import Enum

import chess


class Side(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @classmethod
    def from_color(cls, color: chess.Color) -> "Side":
        return cls.WHITE if color == chess.WHITE else cls.BLACK

    @property
    def color(self) -> chess.Color:
        return chess.WHITE if self is Side.WHITE else chess.BLACK

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameMode(str, Enum):
    """pvp: two humans share the board; pvc: one human against the search."""

    PVP = "pvp"
    PVC = "pvc"
