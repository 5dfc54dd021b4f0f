"""Immutable board snapshots, occupants and moves shared by every game."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from tablegames.core.errors import IllegalMoveError, InvalidSquareError, UnknownPieceError

Square = Tuple[int, int]


@dataclass(frozen=True)
class Piece:
    kind: str
    owner: str

    def to_json(self) -> Dict[str, str]:
        return {"type": self.kind, "owner": self.owner}


# A Reversi stone is just its color string.
Occupant = Union[Piece, str]


def owner_of(occupant: Optional[Occupant]) -> Optional[str]:
    """Return the side owning an occupant (None for an empty square)."""
    if occupant is None:
        return None
    if isinstance(occupant, Piece):
        return occupant.owner
    return occupant


@dataclass(frozen=True)
class BoardMove:
    src: Square
    dst: Square

    def to_dict(self) -> Dict[str, Any]:
        return {"from": list(self.src), "to": list(self.dst)}


@dataclass(frozen=True)
class DropMove:
    kind: str
    position: Square
    index: int

    def to_dict(self) -> Dict[str, Any]:
        return {"pieceType": self.kind, "position": list(self.position), "inventoryIndex": self.index}


@dataclass(frozen=True)
class Placement:
    position: Square

    def to_dict(self) -> Dict[str, Any]:
        return {"position": list(self.position)}


Move = Union[BoardMove, DropMove, Placement]


def _square(value: Any) -> Square:
    try:
        row, col = value
        return int(row), int(col)
    except (TypeError, ValueError) as e:
        raise InvalidSquareError(f"Not a (row, col) pair: {value!r}") from e


def move_from_dict(data: Mapping[str, Any]) -> Move:
    """Rebuild a move from its boundary dict (see ``to_dict``)."""
    if "from" in data and "to" in data:
        return BoardMove(_square(data["from"]), _square(data["to"]))
    if "pieceType" in data:
        try:
            index = int(data["inventoryIndex"])
        except (KeyError, TypeError, ValueError) as e:
            raise IllegalMoveError(f"Drop without a valid inventoryIndex: {data!r}") from e
        return DropMove(str(data["pieceType"]), _square(data["position"]), index)
    if "position" in data:
        return Placement(_square(data["position"]))
    raise IllegalMoveError(f"Unrecognised move: {data!r}")


@dataclass(frozen=True)
class BoardState:
    """Grid snapshot plus per-side hands of captured piece kinds.

    Never mutated: ``replace`` returns a new state, so search branches can
    share their parent without copying it defensively.
    """

    grid: Tuple[Tuple[Optional[Occupant], ...], ...]
    hands: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def empty(cls, size: int) -> "BoardState":
        return cls(tuple(tuple(None for _ in range(size)) for _ in range(size)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[Occupant]]],
                  hands: Optional[Mapping[str, Sequence[str]]] = None) -> "BoardState":
        size = len(rows)
        if size == 0 or any(len(row) != size for row in rows):
            raise InvalidSquareError("Board rows must form a non-empty square grid")
        grid = tuple(tuple(row) for row in rows)
        return cls(grid, {owner: tuple(kinds) for owner, kinds in (hands or {}).items()})

    @property
    def size(self) -> int:
        return len(self.grid)

    def in_bounds(self, square: Square) -> bool:
        row, col = square
        return 0 <= row < self.size and 0 <= col < self.size

    def at(self, square: Square) -> Optional[Occupant]:
        if not self.in_bounds(square):
            raise InvalidSquareError(f"Square {square} is outside a {self.size}x{self.size} board")
        row, col = square
        return self.grid[row][col]

    __getitem__ = at

    def occupied(self) -> Iterator[Tuple[Square, Occupant]]:
        """Row-major iteration over non-empty squares."""
        for row, cells in enumerate(self.grid):
            for col, occupant in enumerate(cells):
                if occupant is not None:
                    yield (row, col), occupant

    def empty_squares(self) -> Iterator[Square]:
        for row, cells in enumerate(self.grid):
            for col, occupant in enumerate(cells):
                if occupant is None:
                    yield (row, col)

    def count(self, owner: str) -> int:
        return sum(1 for _, occupant in self.occupied() if owner_of(occupant) == owner)

    def find(self, kind: str, owner: str) -> Optional[Square]:
        for square, occupant in self.occupied():
            if isinstance(occupant, Piece) and occupant.kind == kind and occupant.owner == owner:
                return square
        return None

    def hand(self, owner: str) -> Tuple[str, ...]:
        return self.hands.get(owner, ())

    def replace(self, changes: Mapping[Square, Optional[Occupant]],
                hands: Optional[Mapping[str, Sequence[str]]] = None) -> "BoardState":
        """Return a new state with ``changes`` written onto a copy of the grid."""
        rows = [list(cells) for cells in self.grid]
        for square, occupant in changes.items():
            if not self.in_bounds(square):
                raise InvalidSquareError(f"Square {square} is outside a {self.size}x{self.size} board")
            rows[square[0]][square[1]] = occupant
        new_hands = self.hands if hands is None else {o: tuple(k) for o, k in hands.items()}
        return BoardState(tuple(tuple(row) for row in rows), dict(new_hands))

    def to_rows(self) -> List[List[Optional[Occupant]]]:
        return [list(cells) for cells in self.grid]


def occupant_to_json(occupant: Optional[Occupant]) -> Any:
    if isinstance(occupant, Piece):
        return occupant.to_json()
    return occupant


def occupant_from_json(value: Any) -> Optional[Occupant]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Mapping) and "type" in value and "owner" in value:
        return Piece(str(value["type"]), str(value["owner"]))
    raise UnknownPieceError(f"Cannot decode occupant {value!r}")


def state_to_json(state: BoardState) -> Dict[str, Any]:
    return {
        "board": [[occupant_to_json(o) for o in row] for row in state.grid],
        "hands": {owner: list(kinds) for owner, kinds in state.hands.items()},
    }


def state_from_json(board: Sequence[Sequence[Any]],
                    hands: Optional[Mapping[str, Sequence[str]]] = None) -> BoardState:
    rows = [[occupant_from_json(value) for value in row] for row in board]
    return BoardState.from_rows(rows, hands)
