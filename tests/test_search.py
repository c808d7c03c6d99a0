from __future__ import annotations

import random

import chess
import pytest

from chessplay import Evaluator, SearchEngine, Side

from conftest import HANGING_QUEEN_FEN, MATE_IN_ONE_FEN, STALEMATE_FEN, random_position


def plain_minimax(rules, evaluator: Evaluator, board: chess.Board, depth: int) -> int:
    """Full-width minimax without pruning, used as the reference value."""
    if depth == 0 or rules.is_game_over(board):
        return evaluator.evaluate(board)
    values = []
    for move in rules.legal_moves(board):
        board.push(move)
        values.append(plain_minimax(rules, evaluator, board, depth - 1))
        board.pop()
    return max(values) if board.turn == chess.WHITE else min(values)


def count_nodes(rules, board: chess.Board, depth: int) -> int:
    if depth == 0 or rules.is_game_over(board):
        return 1
    total = 1
    for move in rules.legal_moves(board):
        board.push(move)
        total += count_nodes(rules, board, depth - 1)
        board.pop()
    return total


# ════════════════════════════════════════════════════════════════════════════
#  TACTICS
# ════════════════════════════════════════════════════════════════════════════


class TestTactics:
    @pytest.mark.parametrize("depth", [1, 2])
    def test_finds_mate_in_one(self, engine, evaluator, depth):
        result = engine.search(chess.Board(MATE_IN_ONE_FEN), depth)
        assert result.best_move is not None
        assert result.best_move.uci == "b1b8"
        assert result.score == evaluator.mate_score

    def test_mate_score_at_depth_3(self, engine, evaluator):
        # Slower mates (Qb7 Kg8 Qg7#) score the same, so only the value is fixed
        result = engine.search(chess.Board(MATE_IN_ONE_FEN), 3)
        assert result.score == evaluator.mate_score

    @pytest.mark.parametrize("depth", [1, 2, 3])
    def test_captures_hanging_queen(self, engine, depth):
        move = engine.best_move(chess.Board(HANGING_QUEEN_FEN), depth)
        assert move is not None
        assert move.uci == "d2d5"
        assert move.captured == "q"

    def test_black_captures_hanging_queen(self, engine):
        board = chess.Board(HANGING_QUEEN_FEN).mirror()
        move = engine.best_move(board, 2)
        assert move is not None
        assert move.color is Side.BLACK
        assert move.uci == "d7d4"

    def test_black_minimizes(self, engine, evaluator):
        # Black to move can mate: the score is the White-relative -mate
        board = chess.Board(MATE_IN_ONE_FEN).mirror()
        result = engine.search(board, 1)
        assert result.best_move.uci == "b8b1"
        assert result.score == -evaluator.mate_score


# ════════════════════════════════════════════════════════════════════════════
#  PRUNING CORRECTNESS
# ════════════════════════════════════════════════════════════════════════════


class TestPruning:
    @pytest.mark.parametrize("seed", range(6))
    def test_matches_plain_minimax_depth_2(self, rules, evaluator, seed):
        board = random_position(seed, plies=8)
        if rules.is_game_over(board):
            pytest.skip("random walk ended the game")
        engine = SearchEngine(evaluator, rules, rng=random.Random(seed))
        result = engine.search(board, 2)
        assert result.score == plain_minimax(rules, evaluator, board.copy(), 2)

    @pytest.mark.parametrize("fen", [HANGING_QUEEN_FEN, "4k3/8/8/8/8/8/3P4/R3K2r w Q - 0 1"])
    def test_matches_plain_minimax_depth_3(self, rules, evaluator, engine, fen):
        board = chess.Board(fen)
        result = engine.search(board, 3)
        assert result.score == plain_minimax(rules, evaluator, board.copy(), 3)

    def test_pruning_visits_fewer_nodes(self, rules, engine):
        board = random_position(2, plies=8)
        result = engine.search(board, 3)
        assert result.nodes < count_nodes(rules, board.copy(), 3)


# ════════════════════════════════════════════════════════════════════════════
#  CONTRACT
# ════════════════════════════════════════════════════════════════════════════


class TestContract:
    def test_position_untouched(self, engine):
        board = random_position(5, plies=6)
        fen, stack = board.fen(), list(board.move_stack)
        engine.search(board, 2)
        assert board.fen() == fen
        assert board.move_stack == stack

    def test_returned_move_is_legal(self, engine):
        board = random_position(9, plies=6)
        move = engine.best_move(board, 2)
        assert move is not None
        assert move.to_move() in board.legal_moves

    def test_no_legal_moves_returns_none(self, engine):
        result = engine.search(chess.Board(STALEMATE_FEN), 2)
        assert result.best_move is None
        assert result.score == 0

    def test_same_seed_same_move(self, evaluator, rules):
        picks = {
            SearchEngine(evaluator, rules, rng=random.Random(42)).best_move(chess.Board(), 1).uci
            for _ in range(3)
        }
        assert len(picks) == 1

    def test_ties_are_broken_by_shuffle(self, evaluator, rules):
        # Nc3 and Nf3 both gain 50 at depth 1 from the start
        picks = {
            SearchEngine(evaluator, rules, rng=random.Random(seed)).best_move(chess.Board(), 1).uci
            for seed in range(30)
        }
        assert picks == {"b1c3", "g1f3"}

    def test_value_is_independent_of_seed(self, evaluator, rules):
        board = random_position(4, plies=6)
        scores = {
            SearchEngine(evaluator, rules, rng=random.Random(seed)).search(board, 2).score
            for seed in range(4)
        }
        assert len(scores) == 1

    def test_depth_below_one_is_clamped(self, engine):
        assert engine.best_move(chess.Board(MATE_IN_ONE_FEN), 0).uci == "b1b8"

    @pytest.mark.parametrize("score", [-10**12, 10**12])
    def test_scores_outside_window_still_pick_a_move(self, rules, score):
        class Constant(Evaluator):
            def evaluate(self, board):
                return score

        for fen in (chess.STARTING_FEN, "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"):
            board = chess.Board(fen)
            result = SearchEngine(Constant(rules), rules, rng=random.Random(3)).search(board, 1)
            assert result.best_move is not None
            assert result.best_move.to_move() in board.legal_moves
            assert result.score == score
