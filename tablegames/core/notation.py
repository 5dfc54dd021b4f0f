"""Algebraic names for squares and moves.

Square names follow chess: file letter from the left, rank counted from the
bottom row. Boards up to 8x8 reuse python-chess square helpers, so the
5x5 shogi board simply uses ``a1`` to ``e5``.
"""

import re
from typing import Optional

import chess

from tablegames.core.board import BoardMove, BoardState, DropMove, Move, Placement, Square
from tablegames.core.errors import IllegalMoveError, InvalidSquareError

_DROP_RE = re.compile(r"^([A-Za-z])@([a-z][0-9])$")


def square_name(square: Square, size: int) -> str:
    row, col = square
    if not (0 <= row < size and 0 <= col < size):
        raise InvalidSquareError(f"Square {square} is outside a {size}x{size} board")
    return chess.square_name(chess.square(col, size - 1 - row))


def parse_square(text: str, size: int) -> Square:
    try:
        sq = chess.parse_square(text.strip().lower())
    except ValueError as e:
        raise InvalidSquareError(f"Not a square name: {text!r}") from e
    col = chess.square_file(sq)
    row = size - 1 - chess.square_rank(sq)
    if not (0 <= row < size and 0 <= col < size):
        raise InvalidSquareError(f"{text!r} is outside a {size}x{size} board")
    return row, col


def move_name(move: Optional[Move], size: int) -> str:
    if move is None:
        return "pass"
    if isinstance(move, BoardMove):
        return square_name(move.src, size) + square_name(move.dst, size)
    if isinstance(move, DropMove):
        return f"{move.kind}@{square_name(move.position, size)}"
    return square_name(move.position, size)


def parse_move(text: str, state: BoardState, owner: str) -> Move:
    """Parse ``e2e4``, ``G@c3`` (drop from ``owner``'s hand) or ``d3`` (placement)."""
    text = text.strip()
    size = state.size
    drop = _DROP_RE.match(text)
    if drop:
        kind = drop.group(1).upper()
        hand = state.hand(owner)
        if kind not in hand:
            raise IllegalMoveError(f"No {kind} in {owner}'s hand")
        return DropMove(kind, parse_square(drop.group(2), size), hand.index(kind))
    if len(text) == 2:
        return Placement(parse_square(text, size))
    try:
        uci = chess.Move.from_uci(text.lower())
    except ValueError as e:
        raise IllegalMoveError(f"Cannot parse move {text!r}") from e
    src = parse_square(chess.square_name(uci.from_square), size)
    dst = parse_square(chess.square_name(uci.to_square), size)
    return BoardMove(src, dst)
