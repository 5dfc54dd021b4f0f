"""Game-independent move generation helpers and the RuleSet contract."""

from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from tablegames.core.board import BoardMove, BoardState, Move, Occupant, Piece, Square, owner_of
from tablegames.core.errors import InvalidSquareError, UnknownPieceError
from tablegames.core.notation import square_name

Direction = Tuple[int, int]

# Row-major neighbours, the enumeration order every game relies on for ties.
KING_DIRECTIONS: List[Direction] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


def mirror(directions: Sequence[Direction]) -> List[Direction]:
    """Flip a direction table vertically for the opposing side."""
    return [(-dr, dc) for dr, dc in directions]


class RuleSet(ABC):
    """Move generation and application for one game.

    Subclasses set the class attributes below. Moves are enumerated
    row-major, then in direction-table order, so ties resolve the same way
    on every call.
    """

    name: str = ""
    size: int = 8
    machine: str = ""
    human: str = ""
    first_to_move: str = ""
    kinds: FrozenSet[str] = frozenset()
    king_kind: Optional[str] = "K"
    allows_pass: bool = False

    @property
    def sides(self) -> Tuple[str, str]:
        return (self.machine, self.human)

    def opponent(self, owner: str) -> str:
        self.check_owner(owner)
        return self.human if owner == self.machine else self.machine

    def check_owner(self, owner: str) -> None:
        if owner not in self.sides:
            raise UnknownPieceError(f"{self.name}: unknown side {owner!r}, expected one of {self.sides}")

    @abstractmethod
    def initial_state(self) -> BoardState:
        ...

    @abstractmethod
    def legal_moves(self, square: Square, state: BoardState, owner: Optional[str] = None) -> List[Move]:
        """Moves available from (or, for placements, onto) a single square."""

    @abstractmethod
    def apply(self, move: Move, state: BoardState, owner: str) -> BoardState:
        """Return the state after ``owner`` plays ``move``. ``state`` is untouched."""

    def all_moves(self, owner: str, state: BoardState) -> List[Move]:
        self.check_owner(owner)
        moves: List[Move] = []
        for square, occupant in state.occupied():
            if owner_of(occupant) == owner:
                moves.extend(self.legal_moves(square, state, owner))
        moves.extend(self.drop_moves(owner, state))
        return moves

    def drop_moves(self, owner: str, state: BoardState) -> List[Move]:
        return []

    def is_legal(self, move: Move, state: BoardState, owner: str) -> bool:
        return move in self.all_moves(owner, state)

    def is_capture(self, move: Move, state: BoardState) -> bool:
        return isinstance(move, BoardMove) and state.at(move.dst) is not None

    def move_priority(self, move: Move, state: BoardState) -> int:
        return 1 if self.is_capture(move, state) else 0

    def order_moves(self, moves: Sequence[Move], state: BoardState) -> List[Move]:
        # sorted() is stable with reverse=True, equal priorities keep enumeration order
        return sorted(moves, key=lambda m: self.move_priority(m, state), reverse=True)

    # -------------------------
    # Game state queries
    # -------------------------
    def winner(self, state: BoardState) -> Optional[str]:
        """Side that captured the opposing king, if any."""
        if self.king_kind is None:
            return None
        if state.find(self.king_kind, self.human) is None:
            return self.machine
        if state.find(self.king_kind, self.machine) is None:
            return self.human
        return None

    def is_game_over(self, state: BoardState) -> bool:
        return self.winner(state) is not None

    def validate(self, state: BoardState) -> None:
        """Fail fast on a state this game cannot have produced."""
        if state.size != self.size:
            raise InvalidSquareError(f"{self.name} is played on {self.size}x{self.size}, got {state.size}x{state.size}")
        for square, occupant in state.occupied():
            self._validate_occupant(square, occupant)
        for owner, kinds in state.hands.items():
            self.check_owner(owner)
            for kind in kinds:
                if kind not in self.kinds:
                    raise UnknownPieceError(f"{self.name}: unknown piece {kind!r} in {owner}'s hand")

    def _validate_occupant(self, square: Square, occupant: Occupant) -> None:
        if not isinstance(occupant, Piece) or occupant.kind not in self.kinds:
            raise UnknownPieceError(f"{self.name}: unknown occupant {occupant!r} on {square}")
        self.check_owner(occupant.owner)

    # -------------------------
    # Shared geometry helpers
    # -------------------------
    def step_moves(self, square: Square, state: BoardState, owner: str,
                   directions: Sequence[Direction]) -> List[Move]:
        row, col = square
        moves: List[Move] = []
        for dr, dc in directions:
            target = (row + dr, col + dc)
            if not state.in_bounds(target):
                continue
            if owner_of(state.at(target)) != owner:
                moves.append(BoardMove(square, target))
        return moves

    def slide_moves(self, square: Square, state: BoardState, owner: str,
                    directions: Sequence[Direction]) -> List[Move]:
        row, col = square
        moves: List[Move] = []
        for dr, dc in directions:
            target = (row + dr, col + dc)
            while state.in_bounds(target):
                occupant = state.at(target)
                if occupant is None:
                    moves.append(BoardMove(square, target))
                else:
                    if owner_of(occupant) != owner:
                        moves.append(BoardMove(square, target))
                    break
                target = (target[0] + dr, target[1] + dc)
        return moves

    # -------------------------
    # Display
    # -------------------------
    def symbol(self, occupant: Optional[Occupant]) -> str:
        if occupant is None:
            return "."
        if isinstance(occupant, Piece):
            return occupant.kind.upper() if occupant.owner == self.human else occupant.kind.lower()
        return "x" if occupant == self.human else "o"

    def render(self, state: BoardState) -> str:
        """ASCII board, top row first, ranks and files labelled."""
        lines = []
        for row, cells in enumerate(state.grid):
            rank = square_name((row, 0), state.size)[1:]
            lines.append(f"{rank} " + " ".join(self.symbol(o) for o in cells))
        files = " ".join(square_name((state.size - 1, col), state.size)[0] for col in range(state.size))
        lines.append("  " + files)
        for owner, kinds in state.hands.items():
            if kinds:
                lines.append(f"{owner} hand: {' '.join(kinds)}")
        return "\n".join(lines)

    def describe(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "size": self.size,
            "machine": self.machine,
            "human": self.human,
            "first_to_move": self.first_to_move,
        }
