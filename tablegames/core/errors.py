"""Exceptions raised on malformed caller input.

All of them derive from ValueError so callers (and the REST layer) can treat
bad input uniformly.
"""


class InvalidSquareError(ValueError):
    """Coordinate outside the board."""


class UnknownPieceError(ValueError):
    """Occupant kind or owner not defined by the game."""


class IllegalMoveError(ValueError):
    """Move that cannot be applied to the given state."""


class UnknownGameError(ValueError):
    pass


class UnknownDifficultyError(ValueError):
    pass
