"""Difficulty tiers: how the engine picks the move it actually plays.

* easy   - usually plays like normal, but now and then deliberately picks
           one of the weakest moves;
* normal - greedy, best one-ply evaluation;
* hard   - alpha-beta search to the configured depth.
"""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from tablegames.config import CONFIG, SearchConfig
from tablegames.core.board import BoardState, Move
from tablegames.core.errors import UnknownDifficultyError
from tablegames.core.notation import move_name
from tablegames.core.search import SearchEngine

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    @classmethod
    def parse(cls, label) -> "Difficulty":
        if isinstance(label, cls):
            return label
        try:
            return cls(str(label).strip().lower())
        except ValueError:
            raise UnknownDifficultyError(
                f"Unknown difficulty {label!r}, expected one of {[d.value for d in cls]}"
            ) from None


class DifficultyPolicy:
    def __init__(self, search: SearchEngine, cfg: Optional[SearchConfig] = None,
                 rng: Optional[random.Random] = None):
        self.search = search
        self.rules = search.rules
        self.evaluator = search.evaluator
        self.cfg = cfg or CONFIG.search
        self.rng = rng or random.Random(self.cfg.rng_seed)

    def find_best_move(self, difficulty, state: BoardState, owner: Optional[str] = None) -> Optional[Move]:
        """Pick ``owner``'s move (machine side by default); None when it has none."""
        level = Difficulty.parse(difficulty)
        owner = owner or self.rules.machine
        self.rules.check_owner(owner)

        if level is Difficulty.EASY:
            move = self.easy_move(state, owner)
        elif level is Difficulty.NORMAL:
            move = self.normal_move(state, owner)
        else:
            move, _ = self.search.search_best_move(state, owner)

        if move is None:
            logger.info("%s: no legal move for %s", self.rules.name, owner)
        return move

    def rate_moves(self, state: BoardState, owner: str) -> List[Tuple[Move, int]]:
        """One-ply evaluation of every move, in enumeration order."""
        rated = []
        for move in self.rules.all_moves(owner, state):
            child = self.rules.apply(move, state, owner)
            rated.append((move, self.evaluator.evaluate(child)))
        return rated

    def normal_move(self, state: BoardState, owner: str) -> Optional[Move]:
        return self._pick_best(self.rate_moves(state, owner), owner)

    def easy_move(self, state: BoardState, owner: str) -> Optional[Move]:
        rated = self.rate_moves(state, owner)
        if not rated:
            return None

        sign = self._sign(owner)
        weakest_first = sorted(rated, key=lambda pair: sign * pair[1])
        if self.rng.random() < self.cfg.easy_blunder_rate:
            pool = weakest_first[:min(self.cfg.easy_pool_size, len(weakest_first))]
            move, score = self.rng.choice(pool)
            logger.debug("%s: easy blunder %s (score %d)", self.rules.name,
                         move_name(move, self.rules.size), score)
            return move
        return self._pick_best(rated, owner)

    def _pick_best(self, rated: List[Tuple[Move, int]], owner: str) -> Optional[Move]:
        sign = self._sign(owner)
        best_move = None
        best_value = None
        for move, score in rated:
            if best_value is None or sign * score > best_value:
                best_value = sign * score
                best_move = move
        return best_move

    def _sign(self, owner: str) -> int:
        return 1 if owner == self.rules.machine else -1
