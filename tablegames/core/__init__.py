"""Core engine components: board state, rules contract, evaluator, search and difficulty policy."""

from .board import BoardMove, BoardState, DropMove, Piece, Placement
from .evaluator import Evaluator
from .policy import Difficulty, DifficultyPolicy
from .rules import RuleSet
from .search import SearchEngine
