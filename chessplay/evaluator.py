from __future__ import annotations

from typing import Dict, List, Optional

import chess

from .config import CONFIG, EvalConfig
from .enums import Side
from .rules import ChessRules, RulesEngine


class Evaluator:
    """Static evaluation for chess positions.

    Positive scores favor White, negative scores favor Black. Units are centipawns.
    Checkmate scores +/- ``mate_score``; every drawn position scores exactly 0.
    """

    # Positional bonuses, laid out as seen from White: first row is rank 8.
    # White reads the mirrored square, Black reads its own square, so both
    # sides get the same bonus for the same relative placement.
    PST_PAWN: List[int] = [
        0, 0, 0, 0, 0, 0, 0, 0,
        50, 50, 50, 50, 50, 50, 50, 50,
        10, 10, 20, 30, 30, 20, 10, 10,
        5, 5, 10, 25, 25, 10, 5, 5,
        0, 0, 0, 20, 20, 0, 0, 0,
        5, -5, -10, 0, 0, -10, -5, 5,
        5, 10, 10, -20, -20, 10, 10, 5,
        0, 0, 0, 0, 0, 0, 0, 0,
    ]

    PST_KNIGHT: List[int] = [
        -50, -40, -30, -30, -30, -30, -40, -50,
        -40, -20, 0, 0, 0, 0, -20, -40,
        -30, 0, 10, 15, 15, 10, 0, -30,
        -30, 5, 15, 20, 20, 15, 5, -30,
        -30, 0, 15, 20, 20, 15, 0, -30,
        -30, 5, 10, 15, 15, 10, 5, -30,
        -40, -20, 0, 5, 5, 0, -20, -40,
        -50, -40, -30, -30, -30, -30, -40, -50,
    ]

    def __init__(self, rules: Optional[RulesEngine] = None, config: Optional[EvalConfig] = None) -> None:
        self.rules = rules or ChessRules()
        self.cfg = config or CONFIG.eval
        self.material_values: Dict[str, int] = dict(self.cfg.piece_values)
        self.mate_score: int = self.cfg.mate_score

    def evaluate(self, board: chess.Board) -> int:
        if self.rules.is_checkmate(board):
            # The side to move is the one mated
            return -self.mate_score if self.rules.turn(board) is Side.WHITE else self.mate_score
        if self.rules.is_draw(board):
            return 0
        return self.material_and_position(board)

    def material_and_position(self, board: chess.Board) -> int:
        score = 0
        for square, kind, side in self.rules.pieces(board):
            value = self.material_values[kind]
            table = self._pst_for(kind)
            if table is not None:
                index = chess.square_mirror(square) if side is Side.WHITE else square
                value += table[index]
            score += value if side is Side.WHITE else -value
        return score

    @classmethod
    def _pst_for(cls, kind: str) -> Optional[List[int]]:
        if kind == "p":
            return cls.PST_PAWN
        if kind == "n":
            return cls.PST_KNIGHT
        return None
