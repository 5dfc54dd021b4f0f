import logging
import time
from typing import Optional, Tuple

from tablegames.core.board import BoardState, Move
from tablegames.core.evaluator import Evaluator
from tablegames.core.notation import move_name
from tablegames.core.rules import RuleSet
from tablegames.core.utils import format_info

logger = logging.getLogger(__name__)

INF = 10**9


class SearchEngine:
    def __init__(self, rules: RuleSet, evaluator: Evaluator, depth: int = 3):
        """
        evaluator.evaluate(state) must return an int, positive when the
        machine side is better. depth = plies searched after the root move.
        """
        self.rules = rules
        self.evaluator = evaluator
        self.max_depth = depth
        self.nodes = 0

    # Public API
    def search_best_move(self, state: BoardState, owner: Optional[str] = None,
                         depth: Optional[int] = None) -> Tuple[Optional[Move], int]:
        """
        Returns (best_move, score) for ``owner`` (machine side by default).
        The score stays machine-positive whoever is searching.
        """
        owner = owner or self.rules.machine
        depth = self.max_depth if depth is None else depth
        sign = 1 if owner == self.rules.machine else -1
        reply_maximizing = self.rules.opponent(owner) == self.rules.machine

        self.nodes = 0
        start_time = time.time()
        best_move = None
        best_value = -INF
        alpha, beta = -INF, INF

        moves = self.rules.order_moves(self.rules.all_moves(owner, state), state)
        for move in moves:
            child = self.rules.apply(move, state, owner)
            score = self._search(child, depth, alpha, beta, reply_maximizing, prune=True)
            # strict comparison: the first of equally scored moves wins
            if sign * score > best_value:
                best_value = sign * score
                best_move = move
            if sign > 0:
                alpha = max(alpha, score)
            else:
                beta = min(beta, score)

        if best_move is None:
            return None, 0

        score = sign * best_value
        elapsed = time.time() - start_time
        logger.info(format_info(self.rules.name, "hard", depth, score, self.nodes, elapsed,
                                move_name(best_move, self.rules.size), self.evaluator.mate_score))
        return best_move, score

    def alphabeta(self, state: BoardState, depth: int, alpha: int, beta: int, maximizing: bool) -> int:
        self.nodes = 0
        return self._search(state, depth, alpha, beta, maximizing, prune=True)

    def minimax(self, state: BoardState, depth: int, maximizing: bool) -> int:
        """Same tree walk as alphabeta without cutoffs, for verification."""
        self.nodes = 0
        return self._search(state, depth, -INF, INF, maximizing, prune=False)

    # -------------------------
    # Core recursion
    # -------------------------
    def _search(self, state: BoardState, depth: int, alpha: int, beta: int,
                maximizing: bool, prune: bool) -> int:
        self.nodes += 1
        if depth <= 0:
            return self.evaluator.evaluate(state)

        terminal = self.evaluator.terminal_score(state)
        if terminal is not None:
            return self._mate_distance(terminal, depth)

        owner = self.rules.machine if maximizing else self.rules.human
        moves = self.rules.all_moves(owner, state)
        if not moves:
            if self.rules.allows_pass and self.rules.all_moves(self.rules.opponent(owner), state):
                return self._search(state, depth - 1, alpha, beta, not maximizing, prune)
            return self._mate_distance(self.evaluator.no_moves_score(state, owner), depth)

        if prune:
            moves = self.rules.order_moves(moves, state)

        if maximizing:
            best = -INF
            for move in moves:
                score = self._search(self.rules.apply(move, state, owner), depth - 1,
                                     alpha, beta, False, prune)
                best = max(best, score)
                alpha = max(alpha, score)
                if prune and beta <= alpha:
                    break
            return best

        best = INF
        for move in moves:
            score = self._search(self.rules.apply(move, state, owner), depth - 1,
                                 alpha, beta, True, prune)
            best = min(best, score)
            beta = min(beta, score)
            if prune and beta <= alpha:
                break
        return best

    def _mate_distance(self, score: int, depth: int) -> int:
        # a decisive result found with more depth left is a quicker one
        if not self.evaluator.is_decisive(score):
            return score
        return score + depth if score > 0 else score - depth
