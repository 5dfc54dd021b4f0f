# tablegames/config.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import os
import tomllib

logger = logging.getLogger(__name__)

# Material values. Kings carry a large value so a lone king still dominates
# the board sum; king loss itself is scored by MATE_SCORE.
CHESS_PIECE_VALUES = {
    "K": 50000,
    "Q": 900,
    "R": 500,
    "B": 330,
    "N": 320,
    "P": 100,
}

SHOGI_PIECE_VALUES = {
    "K": 50000,
    "G": 200,
    "S": 150,
}

# Corners are worth most; the squares next to them hand corners to the opponent.
REVERSI_CELL_VALUES = [
    [100, -20, 10,  5,  5, 10, -20, 100],
    [-20, -50, -2, -2, -2, -2, -50, -20],
    [ 10,  -2,  5,  1,  1,  5,  -2,  10],
    [  5,  -2,  1,  1,  1,  1,  -2,   5],
    [  5,  -2,  1,  1,  1,  1,  -2,   5],
    [ 10,  -2,  5,  1,  1,  5,  -2,  10],
    [-20, -50, -2, -2, -2, -2, -50, -20],
    [100, -20, 10,  5,  5, 10, -20, 100],
]

@dataclass
class SearchConfig:
    hard_depth: Dict[str, int] = field(default_factory=lambda: {
        "chess": 3, "reversi": 4, "shogi": 4
    })
    low_power: bool = False  # resource-constrained callers search shallower
    low_power_reduction: int = 1
    easy_blunder_rate: float = 0.3  # probability that easy plays a weak move
    easy_pool_size: int = 3
    rng_seed: Optional[int] = None  # None means system randomness

    def depth_for(self, game: str) -> int:
        depth = self.hard_depth.get(game, 3)
        if self.low_power:
            depth -= self.low_power_reduction
        return max(1, depth)

@dataclass
class EvalConfig:
    mate_score: int = 100000
    chess_piece_values: Dict[str, int] = field(default_factory=lambda: CHESS_PIECE_VALUES.copy())
    chess_center_baseline: int = 10
    shogi_piece_values: Dict[str, int] = field(default_factory=lambda: SHOGI_PIECE_VALUES.copy())
    shogi_center_baseline: int = 5
    shogi_hand_bonus: int = 20
    reversi_cell_values: List[List[int]] = field(
        default_factory=lambda: [row[:] for row in REVERSI_CELL_VALUES]
    )

@dataclass
class UIConfig:
    engine_name: str = "tablegames"
    default_difficulty: str = "normal"
    api_port: int = 8000

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Unknown config key [%s].%s in %s", section, k, path)
        if "log_level" in raw:
            cfg.log_level = raw["log_level"]
        return cfg

# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("TABLEGAMES_CONFIG_TOML", "config.toml"))
# allow env override of the hard depth for quick debugging
override_depth = os.environ.get("TABLEGAMES_SEARCH_DEPTH")
if override_depth:
    try:
        forced_depth = int(override_depth)
    except ValueError:
        logger.warning("Ignoring non-integer TABLEGAMES_SEARCH_DEPTH=%r", override_depth)
    else:
        for game in CONFIG.search.hard_depth:
            CONFIG.search.hard_depth[game] = forced_depth
