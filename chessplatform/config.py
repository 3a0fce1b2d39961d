# chessplatform/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import tomllib  # python >=3.11

# Material values in pawns. Kings are never captured so they count as 0.
PIECE_VALUES = {
    "PAWN": 1,
    "KNIGHT": 3,
    "BISHOP": 3,
    "ROOK": 5,
    "QUEEN": 9,
    "KING": 0,
}

@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())

@dataclass
class SelectorConfig:
    # medium tier picks at random among the best max(min, ceil(percent% of N)) moves
    medium_top_percent: int = 30
    medium_min_candidates: int = 3
    rng_seed: Optional[int] = None  # None means seed from the OS

@dataclass
class SessionConfig:
    reply_delay_ms: int = 500          # live game, terminal client only
    opponent_name_range: int = 1000    # daily opponents are "Player 0".."Player 999"

@dataclass
class StatsConfig:
    initial_rating: int = 1200
    rating_floor: int = 800
    live_rating_delta: int = 10
    daily_rating_delta: int = 15
    puzzle_rating_bonus: int = 5

@dataclass
class UIConfig:
    app_name: str = "ChessPlatform"

@dataclass
class Config:
    eval: EvalConfig = field(default_factory=EvalConfig)
    selector: SelectorConfig = field(default_factory=SelectorConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"
    store_path: Optional[str] = ".cache/chessplatform.json"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("eval", "selector", "session", "stats", "ui"):
            if section in raw:
                target = getattr(cfg, section)
                for k, v in raw[section].items():
                    if hasattr(target, k):
                        setattr(target, k, v)
        for k in ("log_level", "store_path"):
            if k in raw:
                setattr(cfg, k, raw[k])
        return cfg


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for an entry point (API app or terminal client)."""
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("CHESSPLATFORM_CONFIG_TOML", "config.toml"))
# allow env override of the store location, an empty value keeps state in memory
override_store = os.environ.get("CHESSPLATFORM_STORE_PATH")
if override_store is not None:
    CONFIG.store_path = override_store or None
