"""8x8 Reversi.

Sign convention: white is the machine side and scores positive; black is
the human side and moves first. A side without a placement passes.
"""

from typing import Dict, List, Optional

from tablegames.config import EvalConfig
from tablegames.core.board import BoardState, Move, Occupant, Placement, Square
from tablegames.core.errors import IllegalMoveError, UnknownPieceError
from tablegames.core.evaluator import Evaluator
from tablegames.core.rules import KING_DIRECTIONS, RuleSet

BLACK = "black"
WHITE = "white"


class ReversiRules(RuleSet):
    name = "reversi"
    size = 8
    machine = WHITE
    human = BLACK
    first_to_move = BLACK
    king_kind = None
    allows_pass = True

    def __init__(self, cell_values=None):
        self.cell_values = cell_values or [[0] * 8 for _ in range(8)]

    def initial_state(self) -> BoardState:
        state = BoardState.empty(self.size)
        return state.replace({(3, 3): WHITE, (3, 4): BLACK, (4, 3): BLACK, (4, 4): WHITE})

    def flips(self, square: Square, state: BoardState, owner: str) -> List[Square]:
        """Stones flipped if ``owner`` placed on ``square``; empty when the placement is illegal."""
        if state.at(square) is not None:
            return []
        opponent = self.opponent(owner)
        row, col = square
        flipped: List[Square] = []
        for dr, dc in KING_DIRECTIONS:
            run: List[Square] = []
            cell = (row + dr, col + dc)
            while state.in_bounds(cell) and state.at(cell) == opponent:
                run.append(cell)
                cell = (cell[0] + dr, cell[1] + dc)
            if run and state.in_bounds(cell) and state.at(cell) == owner:
                flipped.extend(run)
        return flipped

    def legal_moves(self, square: Square, state: BoardState, owner: Optional[str] = None) -> List[Move]:
        if owner is None:
            raise IllegalMoveError("reversi placements need the placing color")
        return [Placement(square)] if self.flips(square, state, owner) else []

    def all_moves(self, owner: str, state: BoardState) -> List[Move]:
        self.check_owner(owner)
        return [Placement(square) for square in state.empty_squares()
                if self.flips(square, state, owner)]

    def apply(self, move: Move, state: BoardState, owner: str) -> BoardState:
        if not isinstance(move, Placement):
            raise IllegalMoveError(f"reversi has no {type(move).__name__} moves")
        flipped = self.flips(move.position, state, owner)
        if not flipped:
            raise IllegalMoveError(f"{owner} cannot place on {move.position}")
        changes: Dict[Square, Optional[Occupant]] = {cell: owner for cell in flipped}
        changes[move.position] = owner
        return state.replace(changes)

    def move_priority(self, move: Move, state: BoardState) -> int:
        row, col = move.position
        return self.cell_values[row][col]

    def winner(self, state: BoardState) -> Optional[str]:
        """Side with more stones once neither side can place, None otherwise or on a draw."""
        if not self.is_game_over(state):
            return None
        machine, human = state.count(self.machine), state.count(self.human)
        if machine == human:
            return None
        return self.machine if machine > human else self.human

    def is_game_over(self, state: BoardState) -> bool:
        return not self.all_moves(self.machine, state) and not self.all_moves(self.human, state)

    def _validate_occupant(self, square: Square, occupant: Occupant) -> None:
        if occupant not in self.sides:
            raise UnknownPieceError(f"reversi: unknown stone {occupant!r} on {square}")


class ReversiEvaluator(Evaluator):
    def __init__(self, rules: ReversiRules, cfg: Optional[EvalConfig] = None):
        super().__init__(rules, cfg)
        self.cell_values = self.cfg.reversi_cell_values

    def evaluate(self, state: BoardState) -> int:
        score = 0
        for (row, col), stone in state.occupied():
            score += self.signed(stone, self.cell_values[row][col])
        return score

    def terminal_score(self, state: BoardState) -> Optional[int]:
        # the game only ends when both sides are out of moves, see no_moves_score
        return None

    def no_moves_score(self, state: BoardState, owner: str) -> int:
        """Both sides are out of moves: the stone count decides."""
        diff = state.count(self.rules.machine) - state.count(self.rules.human)
        if diff == 0:
            return 0
        return self.mate_score if diff > 0 else -self.mate_score
