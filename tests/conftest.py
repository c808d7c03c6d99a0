from __future__ import annotations

import random

import chess
import pytest

from chessplay import ChessRules, Config, Evaluator, GameSession, SearchEngine

# Positions shared across test modules
MATE_IN_ONE_FEN = "7k/8/6K1/8/8/8/8/1Q6 w - - 0 1"  # Qb8#
HANGING_QUEEN_FEN = "4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1"  # Rxd5
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"
BLACK_MATED_FEN = "1Q5k/8/6K1/8/8/8/8/8 b - - 0 1"
BARE_KINGS_FEN = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"


@pytest.fixture
def rules() -> ChessRules:
    return ChessRules()


@pytest.fixture
def evaluator(rules) -> Evaluator:
    return Evaluator(rules)


@pytest.fixture
def engine(rules, evaluator) -> SearchEngine:
    return SearchEngine(evaluator, rules, rng=random.Random(1234))


@pytest.fixture
def session(rules, engine) -> GameSession:
    return GameSession(rules=rules, search=engine, config=Config())


def random_position(seed: int, plies: int = 10) -> chess.Board:
    """Board reached from the start by ``plies`` seeded random legal moves."""
    rng = random.Random(seed)
    board = chess.Board()
    for _ in range(plies):
        if board.is_game_over():
            break
        board.push(rng.choice(list(board.legal_moves)))
    return board
