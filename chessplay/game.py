from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import chess

from .ai import SearchEngine
from .config import CONFIG, Config
from .enums import Difficulty, Side
from .errors import IllegalMoveError
from .evaluator import Evaluator
from .probability import WinProbability, WinProbabilityEstimator
from .rules import ChessRules, MoveRecord, RulesEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    """Read-only snapshot of a session.

    ``captured_pieces[side]`` lists the pieces *of* ``side`` taken by the
    opponent, in the order they were captured. Keying is by the colour of
    the lost piece, not by the side that made the capture, so
    ``captured_pieces[Side.WHITE]`` holds the material White has lost.
    """

    fen: str
    turn: Side
    is_check: bool
    is_checkmate: bool
    is_stalemate: bool
    is_draw: bool
    is_game_over: bool
    move_history: Tuple[MoveRecord, ...]
    captured_pieces: Mapping[Side, Tuple[str, ...]]

    def to_dict(self) -> Dict[str, object]:
        last = self.move_history[-1] if self.move_history else None
        return {
            "fen": self.fen,
            "turn": self.turn.value,
            "in_check": self.is_check,
            "checkmate": self.is_checkmate,
            "stalemate": self.is_stalemate,
            "draw": self.is_draw,
            "game_over": self.is_game_over,
            "history": [m.to_dict() for m in self.move_history],
            "last_move": last.uci if last else None,
            "captured": {side.value: list(pieces) for side, pieces in self.captured_pieces.items()},
        }


class GameSession:
    """Owns the authoritative state of one game.

    Every change to the position goes through ``apply_move``, ``undo``,
    ``reset`` or ``load_position``; the derived bookkeeping (history,
    captures, terminal flags) is updated alongside. Not thread-safe: callers
    serialize mutation and searches themselves.
    """

    def __init__(
        self,
        rules: Optional[RulesEngine] = None,
        search: Optional[SearchEngine] = None,
        estimator: Optional[WinProbabilityEstimator] = None,
        config: Optional[Config] = None,
        difficulty: Optional[Difficulty | str] = None,
        player_color: Side | str = Side.WHITE,
    ) -> None:
        self.config = config or CONFIG
        self.rules = rules or ChessRules()
        evaluator = Evaluator(self.rules, self.config.eval)
        self.search = search or SearchEngine(
            evaluator, self.rules, rng=random.Random(self.config.search.seed)
        )
        self.estimator = estimator or WinProbabilityEstimator(evaluator, self.rules)
        self._difficulty = Difficulty(difficulty or self.config.search.default_difficulty)
        self._player_color = Side(player_color)
        self.reset()

    # -- lifecycle -----------------------------------------------------

    def reset(self) -> None:
        self._install(self.rules.new_position())
        logger.debug("Session reset to the standard start")

    def load_position(self, fen: str) -> None:
        board = self.rules.import_position(fen)  # raises InvalidPositionError
        self._install(board)
        logger.info("Loaded position %s", self.start_fen)

    def _install(self, board: chess.Board) -> None:
        self._board = board
        self.start_fen = self.rules.export_position(board)
        self._history: List[MoveRecord] = []
        self._captured: Dict[Side, List[str]] = {Side.WHITE: [], Side.BLACK: []}
        self._refresh_status()

    # -- configuration -------------------------------------------------

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    def set_difficulty(self, difficulty: Difficulty | str) -> None:
        self._difficulty = Difficulty(difficulty)

    @property
    def player_color(self) -> Side:
        return self._player_color

    def set_player_color(self, color: Side | str) -> None:
        self._player_color = Side(color)

    @property
    def search_depth(self) -> int:
        return self.config.depth_for(self._difficulty)

    # -- moves ---------------------------------------------------------

    def apply_move(self, from_square: str, to_square: str, promotion: Optional[str] = None) -> MoveRecord:
        if self._game_over:
            logger.info("Rejected %s%s: game is over", from_square, to_square)
            raise IllegalMoveError("Game is already over")

        move = self.rules.find_move(self._board, from_square, to_square, promotion)
        if move is None:
            logger.info("Rejected illegal move %s%s%s", from_square, to_square, promotion or "")
            raise IllegalMoveError(f"Illegal move: {from_square}{to_square}{promotion or ''}")

        record = self.rules.describe(self._board, move)
        self.rules.apply(self._board, move)
        self._history.append(record)
        if record.captured:
            self._captured[record.color.opponent].append(record.captured)
        self._refresh_status()

        logger.debug("Applied %s (%s)", record.san, record.uci)
        if self._game_over:
            logger.info("Game over after %s: %s", record.san, self._status_name())
        return record

    def apply_uci(self, uci: str) -> MoveRecord:
        if not isinstance(uci, str) or len(uci) not in (4, 5):
            raise IllegalMoveError(f"Illegal move: {uci}")
        return self.apply_move(uci[:2], uci[2:4], uci[4:] or None)

    def undo(self) -> Optional[MoveRecord]:
        """Take back the last move. Returns ``None`` when there is nothing to undo."""
        if not self._history:
            logger.debug("Nothing to undo")
            return None

        self.rules.undo(self._board)
        record = self._history.pop()
        if record.captured:
            self._captured[record.color.opponent].pop()
        self._refresh_status()

        logger.debug("Undid %s", record.san)
        return record

    def _refresh_status(self) -> None:
        self._check = self.rules.is_check(self._board)
        self._checkmate = self.rules.is_checkmate(self._board)
        self._stalemate = self.rules.is_stalemate(self._board)
        self._draw = self.rules.is_draw(self._board)
        self._game_over = self._checkmate or self._stalemate or self._draw

    def _status_name(self) -> str:
        if self._checkmate:
            return "checkmate"
        if self._stalemate:
            return "stalemate"
        if self._draw:
            return "draw"
        return "in progress"

    # -- queries -------------------------------------------------------

    def current_state(self) -> GameState:
        return GameState(
            fen=self.rules.export_position(self._board),
            turn=self.rules.turn(self._board),
            is_check=self._check,
            is_checkmate=self._checkmate,
            is_stalemate=self._stalemate,
            is_draw=self._draw,
            is_game_over=self._game_over,
            move_history=tuple(self._history),
            captured_pieces=MappingProxyType({side: tuple(pieces) for side, pieces in self._captured.items()}),
        )

    @property
    def fen(self) -> str:
        return self.rules.export_position(self._board)

    @property
    def turn(self) -> Side:
        return self.rules.turn(self._board)

    def is_game_over(self) -> bool:
        return self._game_over

    def is_player_turn(self) -> bool:
        return self.turn is self._player_color

    def legal_moves(self, square: Optional[str] = None) -> List[MoveRecord]:
        try:
            moves = self.rules.legal_moves(self._board, square)
        except ValueError as exc:
            raise IllegalMoveError(f"Unknown square: {square}") from exc
        return [self.rules.describe(self._board, m) for m in moves]

    def valid_targets(self, square: str) -> List[str]:
        return [m.to_square for m in self.legal_moves(square)]

    def piece_at(self, square: str) -> Optional[Tuple[str, Side]]:
        return self.rules.get(self._board, square)

    def pgn(self) -> str:
        return self.rules.pgn(self._board)

    # -- engine --------------------------------------------------------

    def best_move(self) -> Optional[MoveRecord]:
        """Search the current position at the configured difficulty."""
        if self._game_over:
            return None
        return self.search.best_move(self._board, self.search_depth)

    def play_best_move(self) -> Optional[MoveRecord]:
        best = self.best_move()
        if best is None:
            return None
        return self.apply_move(best.from_square, best.to_square, best.promotion)

    def evaluation(self) -> int:
        return self.search.evaluator.evaluate(self._board)

    def win_probability(self) -> WinProbability:
        return self.estimator.estimate(self._board)
