from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Tuple

import chess

from .enums import Side
from .evaluator import Evaluator
from .rules import ChessRules, MoveRecord, RulesEngine

logger = logging.getLogger(__name__)

# Alpha-beta window bound; larger than any evaluation including mate scores
INF = 10**9


@dataclass
class SearchResult:
    best_move: Optional[MoveRecord]
    score: int
    nodes: int


class SearchEngine:
    """Fixed-depth minimax with alpha-beta pruning.

    White maximizes and Black minimizes the White-relative evaluation. Root
    moves are shuffled with the injected RNG so equally scored moves vary
    between games; a seeded ``random.Random`` makes the choice reproducible.
    The search runs on a private copy of the position and keeps no state
    between calls.
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        rules: Optional[RulesEngine] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rules = rules or (evaluator.rules if evaluator else ChessRules())
        self.evaluator = evaluator or Evaluator(self.rules)
        self.rng = rng or random.Random()

    def best_move(self, board: chess.Board, depth: int) -> Optional[MoveRecord]:
        return self.search(board, depth).best_move

    def search(self, board: chess.Board, depth: int) -> SearchResult:
        # Search on a copy so callers never observe a half-searched position
        search_board = self.rules.copy(board)
        result = self._alphabeta_root(search_board, max(1, depth))
        logger.debug(
            "search depth=%d best=%s score=%d nodes=%d",
            depth,
            result.best_move.uci if result.best_move else None,
            result.score,
            result.nodes,
        )
        return result

    def _alphabeta_root(self, board: chess.Board, depth: int) -> SearchResult:
        moves = self.rules.legal_moves(board)
        if not moves:
            return SearchResult(best_move=None, score=self.evaluator.evaluate(board), nodes=1)

        self.rng.shuffle(moves)

        maximizing = self.rules.turn(board) is Side.WHITE
        best_value = 0
        best: Optional[chess.Move] = None
        alpha, beta = -INF, INF
        nodes = 1

        for move in moves:
            self.rules.apply(board, move)
            try:
                value, child_nodes = self._alphabeta(board, depth - 1, alpha, beta, not maximizing)
            finally:
                self.rules.undo(board)
            nodes += child_nodes

            # Strict improvement only: ties keep the earlier (shuffled) move
            if best is None or (value > best_value if maximizing else value < best_value):
                best_value, best = value, move
                if maximizing:
                    alpha = max(alpha, value)
                else:
                    beta = min(beta, value)

        return SearchResult(best_move=self.rules.describe(board, best), score=best_value, nodes=nodes)

    def _alphabeta(
        self,
        board: chess.Board,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> Tuple[int, int]:
        if depth == 0 or self.rules.is_game_over(board):
            return self.evaluator.evaluate(board), 1

        nodes = 1
        if maximizing:
            value = -INF
            for move in self.rules.legal_moves(board):
                self.rules.apply(board, move)
                try:
                    score, child_nodes = self._alphabeta(board, depth - 1, alpha, beta, maximizing=False)
                finally:
                    self.rules.undo(board)
                nodes += child_nodes
                value = max(value, score)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return value, nodes
        else:
            value = INF
            for move in self.rules.legal_moves(board):
                self.rules.apply(board, move)
                try:
                    score, child_nodes = self._alphabeta(board, depth - 1, alpha, beta, maximizing=True)
                finally:
                    self.rules.undo(board)
                nodes += child_nodes
                value = min(value, score)
                beta = min(beta, value)
                if beta <= alpha:
                    break
            return value, nodes
