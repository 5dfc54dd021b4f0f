"""Computer opponents for a chess-like game, Reversi and 5x5 shogi."""

from .engine import Engine
from .session import GameSession
