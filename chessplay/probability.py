from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

import chess

from .enums import Side
from .evaluator import Evaluator
from .rules import ChessRules, RulesEngine

# Logistic scale: a 400cp edge is worth 10:1 odds
SCALE = 400
# Keeps 10 ** x inside float range for mate-sized scores
_MAX_EXPONENT = 300


@dataclass(frozen=True)
class WinProbability:
    white: int
    black: int

    def to_dict(self) -> Dict[str, int]:
        return {"white": self.white, "black": self.black}


class WinProbabilityEstimator:
    """Turns an evaluation into a White/Black percentage split summing to 100."""

    def __init__(self, evaluator: Optional[Evaluator] = None, rules: Optional[RulesEngine] = None) -> None:
        self.rules = rules or (evaluator.rules if evaluator else ChessRules())
        self.evaluator = evaluator or Evaluator(self.rules)

    def estimate(self, board: chess.Board) -> WinProbability:
        if self.rules.is_checkmate(board):
            if self.rules.turn(board) is Side.WHITE:
                return WinProbability(white=0, black=100)
            return WinProbability(white=100, black=0)
        if self.rules.is_draw(board):
            return WinProbability(white=50, black=50)
        return self.from_score(self.evaluator.evaluate(board))

    @staticmethod
    def from_score(score: float) -> WinProbability:
        exponent = max(-_MAX_EXPONENT, min(_MAX_EXPONENT, -score / SCALE))
        white = math.floor(100 / (1 + 10 ** exponent) + 0.5)
        return WinProbability(white=white, black=100 - white)
