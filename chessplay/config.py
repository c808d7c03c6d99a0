from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Dict, Optional

from .enums import Difficulty

logger = logging.getLogger(__name__)

# Centipawns, keyed by python-chess piece symbol
PIECE_VALUES: Dict[str, int] = {
    "p": 100,
    "n": 320,
    "b": 330,
    "r": 500,
    "q": 900,
    "k": 20000,
}


@dataclass
class SearchConfig:
    difficulty_depths: Dict[str, int] = field(
        default_factory=lambda: {"easy": 1, "medium": 2, "hard": 3}
    )
    default_difficulty: str = "medium"
    seed: Optional[int] = None  # None means a fresh unseeded RNG per engine


@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())
    # Finite checkmate score; must stay far above any reachable material sum
    mate_score: int = 1_000_000


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    log_level: str = "INFO"

    def depth_for(self, difficulty: Difficulty | str) -> int:
        key = Difficulty(difficulty).value
        return int(self.search.difficulty_depths[key])

    @staticmethod
    def load_from_toml(path: str = "chessplay.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval"):
            for k, v in raw.get(section, {}).items():
                target = getattr(cfg, section)
                if not hasattr(target, k):
                    logger.warning("Ignoring unknown config key %s.%s", section, k)
                    continue
                current = getattr(target, k)
                if isinstance(current, dict):
                    # Partial tables update the defaults instead of replacing them
                    merged = dict(current)
                    merged.update(v)
                    v = merged
                setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg

    @staticmethod
    def from_env() -> "Config":
        cfg = Config.load_from_toml(os.environ.get("CHESSPLAY_CONFIG_TOML", "chessplay.toml"))
        level = os.environ.get("CHESSPLAY_LOG_LEVEL")
        if level:
            cfg.log_level = level
        seed = os.environ.get("CHESSPLAY_SEARCH_SEED")
        if seed:
            try:
                cfg.search.seed = int(seed)
            except ValueError:
                logger.warning("CHESSPLAY_SEARCH_SEED is not an integer: %r", seed)
        return cfg


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger (idempotent)."""
    root = logging.getLogger("chessplay")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)


CONFIG = Config.from_env()
