"""8x8 chess-like variant.

The game ends when a king is captured: there is no check, castling or en
passant. Pawns step (or double-step from their starting rank), capture
diagonally forward and become queens on the far rank.

Sign convention: black is the machine side (top, rows 0-1) and scores
positive; white is the human side and moves first.
"""

from typing import List, Optional

from tablegames.config import EvalConfig
from tablegames.core.board import BoardMove, BoardState, Move, Piece, Square
from tablegames.core.errors import IllegalMoveError, UnknownPieceError
from tablegames.core.evaluator import Evaluator
from tablegames.core.rules import KING_DIRECTIONS, RuleSet

WHITE = "white"
BLACK = "black"

BACK_RANK = "RNBQKBNR"

KNIGHT_DIRECTIONS = [(-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1)]
ROOK_DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]
BISHOP_DIRECTIONS = [(-1, -1), (-1, 1), (1, -1), (1, 1)]

STEP_DIRECTIONS = {
    "K": KING_DIRECTIONS,
    "N": KNIGHT_DIRECTIONS,
}
SLIDE_DIRECTIONS = {
    "R": ROOK_DIRECTIONS,
    "B": BISHOP_DIRECTIONS,
    "Q": ROOK_DIRECTIONS + BISHOP_DIRECTIONS,
}

# captures are searched before every quiet move, even a king taking a pawn
CAPTURE_PRIORITY = 1_000_000


class ChessRules(RuleSet):
    name = "chess"
    size = 8
    machine = BLACK
    human = WHITE
    first_to_move = WHITE
    kinds = frozenset("KQRBNP")

    def __init__(self, piece_values=None):
        self.piece_values = piece_values or {}

    def initial_state(self) -> BoardState:
        rows: List[List[Optional[Piece]]] = [[None] * 8 for _ in range(8)]
        for col, kind in enumerate(BACK_RANK):
            rows[0][col] = Piece(kind, BLACK)
            rows[1][col] = Piece("P", BLACK)
            rows[6][col] = Piece("P", WHITE)
            rows[7][col] = Piece(kind, WHITE)
        return BoardState.from_rows(rows)

    def forward(self, owner: str) -> int:
        return 1 if owner == BLACK else -1

    def start_row(self, owner: str) -> int:
        return 1 if owner == BLACK else 6

    def last_row(self, owner: str) -> int:
        return 7 if owner == BLACK else 0

    def legal_moves(self, square: Square, state: BoardState, owner: Optional[str] = None) -> List[Move]:
        piece = state.at(square)
        if not isinstance(piece, Piece) or (owner is not None and piece.owner != owner):
            return []
        if piece.kind == "P":
            return self._pawn_moves(square, state, piece.owner)
        if piece.kind in SLIDE_DIRECTIONS:
            return self.slide_moves(square, state, piece.owner, SLIDE_DIRECTIONS[piece.kind])
        if piece.kind in STEP_DIRECTIONS:
            return self.step_moves(square, state, piece.owner, STEP_DIRECTIONS[piece.kind])
        raise UnknownPieceError(f"chess: unknown piece {piece.kind!r} on {square}")

    def _pawn_moves(self, square: Square, state: BoardState, owner: str) -> List[Move]:
        row, col = square
        forward = self.forward(owner)
        moves: List[Move] = []

        one = (row + forward, col)
        if state.in_bounds(one) and state.at(one) is None:
            moves.append(BoardMove(square, one))
            two = (row + 2 * forward, col)
            if row == self.start_row(owner) and state.in_bounds(two) and state.at(two) is None:
                moves.append(BoardMove(square, two))

        for dc in (-1, 1):
            target = (row + forward, col + dc)
            if not state.in_bounds(target):
                continue
            victim = state.at(target)
            if isinstance(victim, Piece) and victim.owner != owner:
                moves.append(BoardMove(square, target))
        return moves

    def apply(self, move: Move, state: BoardState, owner: str) -> BoardState:
        if not isinstance(move, BoardMove):
            raise IllegalMoveError(f"chess has no {type(move).__name__} moves")
        piece = state.at(move.src)
        if not isinstance(piece, Piece) or piece.owner != owner:
            raise IllegalMoveError(f"No {owner} piece on {move.src}")
        target = state.at(move.dst)
        if isinstance(target, Piece) and target.owner == owner:
            raise IllegalMoveError(f"{move.dst} is occupied by {owner}'s own piece")

        if piece.kind == "P" and move.dst[0] == self.last_row(owner):
            piece = Piece("Q", owner)
        return state.replace({move.src: None, move.dst: piece})

    def move_priority(self, move: Move, state: BoardState) -> int:
        # MVV-LVA: most valuable victim first, cheapest attacker breaks ties
        if not self.is_capture(move, state):
            return 0
        victim = state.at(move.dst)
        attacker = state.at(move.src)
        return (CAPTURE_PRIORITY + 10 * self.piece_values.get(victim.kind, 0)
                - self.piece_values.get(attacker.kind, 0))


class ChessEvaluator(Evaluator):
    def __init__(self, rules: ChessRules, cfg: Optional[EvalConfig] = None):
        super().__init__(rules, cfg)
        self.values = self.cfg.chess_piece_values
        self.baseline = self.cfg.chess_center_baseline

    def evaluate(self, state: BoardState) -> int:
        terminal = self.terminal_score(state)
        if terminal is not None:
            return terminal

        score = 0
        for square, piece in state.occupied():
            value = self.values.get(piece.kind, 0) + self.center_bonus(square, self.baseline)
            score += self.signed(piece.owner, value)
        return score
