from abc import ABC, abstractmethod
from typing import Optional

from tablegames.config import CONFIG, EvalConfig
from tablegames.core.board import BoardState, Square
from tablegames.core.rules import RuleSet


class Evaluator(ABC):
    """Static evaluation, always signed so that positive favours ``rules.machine``."""

    def __init__(self, rules: RuleSet, cfg: Optional[EvalConfig] = None):
        self.rules = rules
        self.cfg = cfg or CONFIG.eval
        self.mate_score = self.cfg.mate_score

    @abstractmethod
    def evaluate(self, state: BoardState) -> int:
        ...

    def signed(self, owner: str, value: int) -> int:
        return value if owner == self.rules.machine else -value

    def terminal_score(self, state: BoardState) -> Optional[int]:
        """Mate score toward the side still holding its king, None while both kings live."""
        winner = self.rules.winner(state)
        if winner is None:
            return None
        return self.signed(winner, self.mate_score)

    def no_moves_score(self, state: BoardState, owner: str) -> int:
        """``owner`` is to move and cannot: a loss for ``owner``."""
        return self.signed(owner, -self.mate_score)

    def is_decisive(self, score: int) -> bool:
        return abs(score) >= self.mate_score

    def center_bonus(self, square: Square, baseline: int) -> int:
        """``baseline - |centerRow - row| - |centerCol - col|``.

        Doubled coordinates keep the half-square center of even boards integral.
        """
        row, col = square
        last = self.rules.size - 1
        return baseline - (abs(2 * row - last) + abs(2 * col - last)) // 2
