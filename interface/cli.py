"""Play a game against the engine in the terminal.

    python -m interface.cli --game shogi --difficulty hard
"""

import argparse
import logging

from tablegames.config import CONFIG
from tablegames.core.notation import move_name, parse_move
from tablegames.core.policy import Difficulty
from tablegames.engine import Engine
from tablegames.games import GAMES
from tablegames.session import GameSession

PROMPTS = {
    "chess": "Enter your move (e2e4): ",
    "reversi": "Enter your placement (d3): ",
    "shogi": "Enter your move (c1c2) or drop (G@c3): ",
}


def play(session: GameSession, read=input, write=print) -> str:
    """Human plays ``rules.human``, the engine answers. Returns the result string."""
    rules = session.rules
    while not session.is_game_over():
        write(rules.render(session.state))
        write("----------------------------")

        if session.turn == rules.human:
            text = read(PROMPTS.get(rules.name, "Enter your move: ")).strip()
            if text in ("quit", "exit"):
                write("Game abandoned")
                return "*"
            try:
                move = parse_move(text, session.state, session.turn)
            except ValueError as e:
                write(f"Invalid input: {e}")
                continue
            if not session.make_move(move):
                write("Illegal move, try again.")
                continue
        else:
            move = session.play_engine_move()
            write(f"Engine plays: {move_name(move, rules.size)} | Eval: {session.engine.evaluate(session.state)}")

        if session.history and session.history[-1] is None:
            write(f"{rules.opponent(session.turn)} cannot move and passes")

    write(rules.render(session.state))
    write("Game Over")
    write(f"Result: {session.result()}")
    return session.result()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Play against the tablegames engine")
    parser.add_argument("--game", choices=GAMES, default="chess")
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty],
                        default=CONFIG.ui.default_difficulty)
    parser.add_argument("--depth", type=int, default=None, help="hard search depth override")
    args = parser.parse_args(argv)
    if args.depth is not None and args.depth < 1:
        parser.error("--depth must be at least 1")

    logging.basicConfig(level=CONFIG.log_level, format="%(levelname)s %(name)s: %(message)s")
    session = GameSession(args.game, args.difficulty, engine=Engine(args.game, depth=args.depth))
    play(session)


if __name__ == "__main__":
    main()
