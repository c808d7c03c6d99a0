from __future__ import annotations


class ChessPlayError(Exception):
    pass


class IllegalMoveError(ChessPlayError, ValueError):
    """Raised when a move is not legal in the current position.

    The session is left exactly as it was before the call.
    """


class InvalidPositionError(ChessPlayError, ValueError):
    """Raised when a serialized position cannot be loaded."""
