"""Game registry: name -> (RuleSet, Evaluator) pair built from the eval config."""

from typing import Optional, Tuple

from tablegames.config import CONFIG, EvalConfig
from tablegames.core.errors import UnknownGameError
from tablegames.core.evaluator import Evaluator
from tablegames.core.rules import RuleSet

from .chesslike import ChessEvaluator, ChessRules
from .minishogi import ShogiEvaluator, ShogiRules
from .reversi import ReversiEvaluator, ReversiRules

GAMES = ("chess", "reversi", "shogi")


def load_game(name: str, cfg: Optional[EvalConfig] = None) -> Tuple[RuleSet, Evaluator]:
    cfg = cfg or CONFIG.eval
    if name == "chess":
        rules = ChessRules(cfg.chess_piece_values)
        return rules, ChessEvaluator(rules, cfg)
    if name == "reversi":
        rules = ReversiRules(cfg.reversi_cell_values)
        return rules, ReversiEvaluator(rules, cfg)
    if name == "shogi":
        rules = ShogiRules(cfg.shogi_piece_values)
        return rules, ShogiEvaluator(rules, cfg)
    raise UnknownGameError(f"Unknown game {name!r}, expected one of {list(GAMES)}")
