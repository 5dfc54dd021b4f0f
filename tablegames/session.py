"""Headless game session: turn order, history, passes and game over."""

import logging
from typing import Dict, List, Optional

from tablegames.config import CONFIG
from tablegames.core.board import BoardMove, BoardState, Move, Occupant, Square
from tablegames.core.errors import IllegalMoveError
from tablegames.core.notation import move_name
from tablegames.core.policy import Difficulty
from tablegames.engine import Engine

logger = logging.getLogger(__name__)


class GameSession:
    def __init__(self, game: str = "chess", difficulty=None, engine: Optional[Engine] = None):
        """Start a new game; the engine plays ``rules.machine`` at ``difficulty``."""
        self.engine = engine or Engine(game)
        self.rules = self.engine.rules
        self.difficulty = Difficulty.parse(difficulty or CONFIG.ui.default_difficulty)
        self.reset()

    def reset(self):
        """Back to the initial position."""
        self.state: BoardState = self.rules.initial_state()
        self.turn: str = self.rules.first_to_move
        self.history: List[Optional[Move]] = []
        self.captured: Dict[str, List[Occupant]] = {side: [] for side in self.rules.sides}
        self._undo_stack = []

    def legal_moves(self, square: Optional[Square] = None) -> List[Move]:
        """Moves for the side to move, optionally restricted to one square."""
        if self.is_game_over():
            return []
        if square is None:
            return self.rules.all_moves(self.turn, self.state)
        return self.rules.legal_moves(square, self.state, self.turn)

    def make_move(self, move: Move) -> bool:
        """Play ``move`` for the side to move. Returns True if legal."""
        if self.is_game_over():
            return False
        try:
            if not self.rules.is_legal(move, self.state, self.turn):
                return False
            new_state = self.rules.apply(move, self.state, self.turn)
        except ValueError as e:
            logger.debug("Rejected %r: %s", move, e)
            return False

        captured = {side: list(pieces) for side, pieces in self.captured.items()}
        self._undo_stack.append((self.state, self.turn, len(self.history), captured))
        if isinstance(move, BoardMove) and self.state.at(move.dst) is not None:
            self.captured[self.turn].append(self.state.at(move.dst))

        self.state = new_state
        self.history.append(move)
        self._advance_turn()
        return True

    def play_engine_move(self, difficulty=None) -> Optional[Move]:
        """Let the engine choose and play for the side to move."""
        if self.is_game_over():
            return None
        level = Difficulty.parse(difficulty or self.difficulty)
        move = self.engine.find_best_move(level, self.state, self.turn)
        if move is None:
            return None
        if not self.make_move(move):
            raise IllegalMoveError(f"engine produced illegal move {move!r}")
        logger.info("%s: %s plays %s", self.rules.name, self.history_owner(len(self.history) - 1),
                    move_name(move, self.rules.size))
        return move

    def undo_move(self):
        """Take back the last move (and any pass that followed it)."""
        if not self._undo_stack:
            return
        self.state, self.turn, length, self.captured = self._undo_stack.pop()
        del self.history[length:]

    def _advance_turn(self):
        nxt = self.rules.opponent(self.turn)
        if (self.rules.allows_pass
                and not self.rules.all_moves(nxt, self.state)
                and self.rules.all_moves(self.turn, self.state)):
            logger.info("%s: %s has no move and passes", self.rules.name, nxt)
            self.history.append(None)
            return
        self.turn = nxt

    def history_owner(self, index: int) -> str:
        """Side that made history entry ``index`` (passes included)."""
        owner = self.rules.first_to_move
        for _ in range(index):
            owner = self.rules.opponent(owner)
        return owner

    # -------------------------
    # Game over
    # -------------------------
    def is_game_over(self) -> bool:
        if self.rules.is_game_over(self.state):
            return True
        # without passing, a side that cannot move has lost
        return not self.rules.allows_pass and not self.rules.all_moves(self.turn, self.state)

    def winner(self) -> Optional[str]:
        """Winning side, or None while playing or on a draw."""
        winner = self.rules.winner(self.state)
        if winner is not None:
            return winner
        if self.is_game_over() and not self.rules.allows_pass:
            return self.rules.opponent(self.turn)
        return None

    def disc_counts(self) -> Dict[str, int]:
        return {side: self.state.count(side) for side in self.rules.sides}

    def result(self) -> str:
        if not self.is_game_over():
            return "*"
        winner = self.winner()
        if winner is None:
            return "draw"
        return f"{winner} wins"
