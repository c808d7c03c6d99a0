"""Chess game core: session state, evaluation, and computer opponent.

Modules:
- rules: RulesEngine interface and its python-chess implementation
- game: GameSession, the authoritative state of one game
- evaluator: Static material + piece-square evaluation
- ai: Minimax with alpha-beta pruning at a difficulty-selected depth
- probability: Evaluation to win-probability split
"""

from .ai import SearchEngine, SearchResult
from .config import CONFIG, Config
from .enums import Difficulty, GameMode, Side
from .errors import ChessPlayError, IllegalMoveError, InvalidPositionError
from .evaluator import Evaluator
from .game import GameSession, GameState
from .probability import WinProbability, WinProbabilityEstimator
from .rules import ChessRules, MoveRecord, RulesEngine

__all__ = [
    "CONFIG",
    "ChessPlayError",
    "ChessRules",
    "Config",
    "Difficulty",
    "Evaluator",
    "GameMode",
    "GameSession",
    "GameState",
    "IllegalMoveError",
    "InvalidPositionError",
    "MoveRecord",
    "RulesEngine",
    "SearchEngine",
    "SearchResult",
    "Side",
    "WinProbability",
    "WinProbabilityEstimator",
]
