from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Tuple

import chess
import chess.pgn

from .enums import Side
from .errors import InvalidPositionError


@dataclass(frozen=True)
class MoveRecord:
    """A move as played, described against the position it was made in."""

    from_square: str
    to_square: str
    piece: str
    color: Side
    san: str
    captured: Optional[str] = None
    promotion: Optional[str] = None

    @property
    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"

    def to_move(self) -> chess.Move:
        return chess.Move.from_uci(self.uci)

    def to_dict(self) -> dict:
        return {
            "from": self.from_square,
            "to": self.to_square,
            "piece": self.piece,
            "color": self.color.value,
            "san": self.san,
            "uci": self.uci,
            "captured": self.captured,
            "promotion": self.promotion,
        }


class RulesEngine(Protocol):
    """Move generation, terminal detection and serialization.

    The core never decides legality on its own; everything it knows about
    the rules of chess comes through this interface.
    """

    def new_position(self) -> chess.Board: ...

    def copy(self, position: chess.Board) -> chess.Board: ...

    def import_position(self, fen: str) -> chess.Board: ...

    def export_position(self, position: chess.Board) -> str: ...

    def legal_moves(self, position: chess.Board, square: Optional[str] = None) -> List[chess.Move]: ...

    def find_move(
        self, position: chess.Board, from_square: str, to_square: str, promotion: Optional[str] = None
    ) -> Optional[chess.Move]: ...

    def describe(self, position: chess.Board, move: chess.Move) -> MoveRecord: ...

    def apply(self, position: chess.Board, move: chess.Move) -> None: ...

    def undo(self, position: chess.Board) -> chess.Move: ...

    def turn(self, position: chess.Board) -> Side: ...

    def is_check(self, position: chess.Board) -> bool: ...

    def is_checkmate(self, position: chess.Board) -> bool: ...

    def is_stalemate(self, position: chess.Board) -> bool: ...

    def is_draw(self, position: chess.Board) -> bool: ...

    def is_game_over(self, position: chess.Board) -> bool: ...

    def get(self, position: chess.Board, square: str) -> Optional[Tuple[str, Side]]: ...

    def pieces(self, position: chess.Board) -> Iterator[Tuple[int, str, Side]]: ...

    def pgn(self, position: chess.Board) -> str: ...


class ChessRules:
    """RulesEngine backed by python-chess. Positions are ``chess.Board``s."""

    def new_position(self) -> chess.Board:
        return chess.Board()

    def copy(self, position: chess.Board) -> chess.Board:
        return position.copy()

    def import_position(self, fen: str) -> chess.Board:
        if not isinstance(fen, str) or not fen.strip():
            raise InvalidPositionError("Empty FEN")
        try:
            board = chess.Board(fen.strip())
        except ValueError as exc:
            raise InvalidPositionError(f"Invalid FEN: {exc}") from exc
        if not board.is_valid():
            raise InvalidPositionError(f"Invalid position ({board.status()!r}): {fen}")
        return board

    def export_position(self, position: chess.Board) -> str:
        return position.fen()

    def legal_moves(self, position: chess.Board, square: Optional[str] = None) -> List[chess.Move]:
        if square is None:
            return list(position.legal_moves)
        from_sq = chess.parse_square(square)
        return [m for m in position.legal_moves if m.from_square == from_sq]

    def find_move(
        self, position: chess.Board, from_square: str, to_square: str, promotion: Optional[str] = None
    ) -> Optional[chess.Move]:
        try:
            from_sq = chess.parse_square(from_square)
            to_sq = chess.parse_square(to_square)
            promo = chess.Piece.from_symbol(promotion).piece_type if promotion else None
        except ValueError:
            return None

        move = chess.Move(from_sq, to_sq, promotion=promo)
        if move in position.legal_moves:
            return move

        # Auto-queen when a pawn reaches the last rank without a promotion piece
        if promo is None:
            promo_move = chess.Move(from_sq, to_sq, promotion=chess.QUEEN)
            if promo_move in position.legal_moves:
                return promo_move
            return None

        # A promotion piece sent with an ordinary move is ignored
        plain = chess.Move(from_sq, to_sq)
        if plain in position.legal_moves:
            return plain
        return None

    def describe(self, position: chess.Board, move: chess.Move) -> MoveRecord:
        piece = position.piece_at(move.from_square)
        if piece is None:
            raise ValueError(f"No piece on {chess.square_name(move.from_square)}")

        captured: Optional[str] = None
        if position.is_en_passant(move):
            captured = "p"
        elif position.is_capture(move):
            victim = position.piece_at(move.to_square)
            if victim is not None:
                captured = chess.piece_symbol(victim.piece_type)

        return MoveRecord(
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            piece=chess.piece_symbol(piece.piece_type),
            color=Side.from_color(piece.color),
            san=position.san(move),
            captured=captured,
            promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
        )

    def apply(self, position: chess.Board, move: chess.Move) -> None:
        position.push(move)

    def undo(self, position: chess.Board) -> chess.Move:
        return position.pop()

    def turn(self, position: chess.Board) -> Side:
        return Side.from_color(position.turn)

    def is_check(self, position: chess.Board) -> bool:
        return position.is_check()

    def is_checkmate(self, position: chess.Board) -> bool:
        return position.is_checkmate()

    def is_stalemate(self, position: chess.Board) -> bool:
        return position.is_stalemate()

    def is_draw(self, position: chess.Board) -> bool:
        return (
            position.is_stalemate()
            or position.is_insufficient_material()
            or position.is_fifty_moves()
            or position.is_repetition(3)
        )

    def is_game_over(self, position: chess.Board) -> bool:
        return self.is_checkmate(position) or self.is_draw(position)

    def get(self, position: chess.Board, square: str) -> Optional[Tuple[str, Side]]:
        piece = position.piece_at(chess.parse_square(square))
        if piece is None:
            return None
        return chess.piece_symbol(piece.piece_type), Side.from_color(piece.color)

    def pieces(self, position: chess.Board) -> Iterator[Tuple[int, str, Side]]:
        for square, piece in position.piece_map().items():
            yield square, chess.piece_symbol(piece.piece_type), Side.from_color(piece.color)

    def pgn(self, position: chess.Board) -> str:
        game = chess.pgn.Game.from_board(position)
        return str(game)
