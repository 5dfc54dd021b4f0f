"""5x5 reduced shogi: king, gold and silver, with drops and no promotion.

Captured pieces join the capturer's hand and can be dropped on any empty
square. Sign convention: "ai" is the machine side (top row) and scores
positive; "player" is the human side and moves first.
"""

from typing import Dict, List, Optional

from tablegames.config import EvalConfig
from tablegames.core.board import BoardMove, BoardState, DropMove, Move, Piece, Square
from tablegames.core.errors import IllegalMoveError, UnknownPieceError
from tablegames.core.evaluator import Evaluator
from tablegames.core.rules import KING_DIRECTIONS, RuleSet, mirror

AI = "ai"
PLAYER = "player"

BACK_RANK = "SGKGS"

# Tables for the side moving down the board (ai); the player's are mirrored.
GOLD_DIRECTIONS = [(1, -1), (1, 0), (1, 1), (0, -1), (0, 1), (-1, 0)]
SILVER_DIRECTIONS = [(1, -1), (1, 0), (1, 1), (-1, -1), (-1, 1)]

DIRECTIONS = {
    AI: {"K": KING_DIRECTIONS, "G": GOLD_DIRECTIONS, "S": SILVER_DIRECTIONS},
    PLAYER: {"K": KING_DIRECTIONS, "G": mirror(GOLD_DIRECTIONS), "S": mirror(SILVER_DIRECTIONS)},
}

CAPTURE_PRIORITY = 1_000_000


class ShogiRules(RuleSet):
    name = "shogi"
    size = 5
    machine = AI
    human = PLAYER
    first_to_move = PLAYER
    kinds = frozenset("KGS")

    def __init__(self, piece_values=None):
        self.piece_values = piece_values or {}

    def initial_state(self) -> BoardState:
        rows: List[List[Optional[Piece]]] = [[None] * 5 for _ in range(5)]
        for col, kind in enumerate(BACK_RANK):
            rows[0][col] = Piece(kind, AI)
            rows[4][col] = Piece(kind, PLAYER)
        return BoardState.from_rows(rows, {AI: (), PLAYER: ()})

    def legal_moves(self, square: Square, state: BoardState, owner: Optional[str] = None) -> List[Move]:
        piece = state.at(square)
        if not isinstance(piece, Piece) or (owner is not None and piece.owner != owner):
            return []
        table = DIRECTIONS[piece.owner].get(piece.kind)
        if table is None:
            raise UnknownPieceError(f"shogi: unknown piece {piece.kind!r} on {square}")
        return self.step_moves(square, state, piece.owner, table)

    def drop_moves(self, owner: str, state: BoardState) -> List[Move]:
        moves: List[Move] = []
        empty = list(state.empty_squares())
        for index, kind in enumerate(state.hand(owner)):
            moves.extend(DropMove(kind, square, index) for square in empty)
        return moves

    def is_legal(self, move: Move, state: BoardState, owner: str) -> bool:
        if isinstance(move, DropMove):
            hand = state.hand(owner)
            return (0 <= move.index < len(hand) and hand[move.index] == move.kind
                    and state.in_bounds(move.position) and state.at(move.position) is None)
        return super().is_legal(move, state, owner)

    def apply(self, move: Move, state: BoardState, owner: str) -> BoardState:
        self.check_owner(owner)
        hands: Dict[str, List[str]] = {side: list(state.hand(side)) for side in self.sides}

        if isinstance(move, BoardMove):
            piece = state.at(move.src)
            if not isinstance(piece, Piece) or piece.owner != owner:
                raise IllegalMoveError(f"No {owner} piece on {move.src}")
            target = state.at(move.dst)
            if isinstance(target, Piece):
                if target.owner == owner:
                    raise IllegalMoveError(f"{move.dst} is occupied by {owner}'s own piece")
                hands[owner].append(target.kind)
            return state.replace({move.src: None, move.dst: piece}, hands)

        if isinstance(move, DropMove):
            hand = hands[owner]
            # the index is re-checked against the hand right before removal
            if not (0 <= move.index < len(hand)) or hand[move.index] != move.kind:
                raise IllegalMoveError(f"{owner} has no {move.kind} at hand index {move.index}")
            if state.at(move.position) is not None:
                raise IllegalMoveError(f"Cannot drop on occupied square {move.position}")
            del hand[move.index]
            return state.replace({move.position: Piece(move.kind, owner)}, hands)

        raise IllegalMoveError(f"shogi has no {type(move).__name__} moves")

    def move_priority(self, move: Move, state: BoardState) -> int:
        if not self.is_capture(move, state):
            return 0
        return CAPTURE_PRIORITY + self.piece_values.get(state.at(move.dst).kind, 0)


class ShogiEvaluator(Evaluator):
    def __init__(self, rules: ShogiRules, cfg: Optional[EvalConfig] = None):
        super().__init__(rules, cfg)
        self.values = self.cfg.shogi_piece_values
        self.baseline = self.cfg.shogi_center_baseline
        self.hand_bonus = self.cfg.shogi_hand_bonus

    def evaluate(self, state: BoardState) -> int:
        terminal = self.terminal_score(state)
        if terminal is not None:
            return terminal

        score = 0
        for square, piece in state.occupied():
            value = self.values.get(piece.kind, 0) + self.center_bonus(square, self.baseline)
            score += self.signed(piece.owner, value)
        for owner in self.rules.sides:
            for kind in state.hand(owner):
                score += self.signed(owner, self.values.get(kind, 0) + self.hand_bonus)
        return score
