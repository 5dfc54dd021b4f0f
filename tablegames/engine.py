import random
from typing import List, Optional

from tablegames.config import CONFIG
from tablegames.core.board import BoardState, Move
from tablegames.core.policy import DifficultyPolicy
from tablegames.core.search import SearchEngine
from tablegames.games import load_game


class Engine:
    """One game's rules, evaluator, search and policy wired from the config.

    Stateless between calls: every request re-enumerates from the state it
    is given.
    """

    def __init__(self, game: str = "chess", depth: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        self.rules, self.evaluator = load_game(game)
        if depth is None:
            depth = CONFIG.search.depth_for(self.rules.name)
        elif depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")
        self.search = SearchEngine(self.rules, self.evaluator, depth=depth)
        self.policy = DifficultyPolicy(self.search, rng=rng)

    @property
    def game(self) -> str:
        return self.rules.name

    def find_best_move(self, difficulty, state: BoardState, owner: Optional[str] = None) -> Optional[Move]:
        self.rules.validate(state)
        return self.policy.find_best_move(difficulty, state, owner)

    def legal_moves(self, state: BoardState, owner: str, square=None) -> List[Move]:
        self.rules.validate(state)
        if square is None:
            return self.rules.all_moves(owner, state)
        return self.rules.legal_moves(square, state, owner)

    def evaluate(self, state: BoardState) -> int:
        return self.evaluator.evaluate(state)
