"""FastAPI REST interface for the game engines."""

import threading
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from tablegames.config import CONFIG
from tablegames.core.board import Move, move_from_dict, state_from_json, state_to_json
from tablegames.core.notation import move_name, parse_move
from tablegames.core.policy import Difficulty
from tablegames.engine import Engine
from tablegames.games import GAMES
from tablegames.session import GameSession

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# One engine per game, shared by stateless requests and sessions. The engine
# keeps a node counter and an RNG, so every call into it holds the game lock.
engines = {name: Engine(name) for name in GAMES}
sessions = {name: GameSession(name, engine=engines[name]) for name in GAMES}
_game_locks = {name: threading.Lock() for name in GAMES}


class PositionRequest(BaseModel):
    game: str
    board: List[List[Any]]
    hands: Dict[str, List[str]] = Field(default_factory=dict)
    owner: Optional[str] = None


class BestMoveRequest(PositionRequest):
    difficulty: str = CONFIG.ui.default_difficulty


class LegalMovesRequest(PositionRequest):
    square: Optional[List[int]] = None


class MoveRequest(BaseModel):
    move: Union[str, Dict[str, Any]]  # notation ("e2e4", "G@c3", "d3") or boundary dict


class SearchRequest(BaseModel):
    difficulty: Optional[str] = None


def _engine(game: str) -> Engine:
    if game not in engines:
        raise HTTPException(status_code=404, detail=f"Unknown game: {game}")
    return engines[game]


def _session(game: str) -> GameSession:
    if game not in sessions:
        raise HTTPException(status_code=404, detail=f"Unknown game: {game}")
    return sessions[game]


def _move_json(move: Optional[Move], size: int) -> Dict[str, Any]:
    return {
        "move": move.to_dict() if move is not None else None,
        "notation": move_name(move, size) if move is not None else None,
    }


def _session_json(session: GameSession) -> Dict[str, Any]:
    payload = state_to_json(session.state)
    payload.update({
        "game": session.rules.name,
        "turn": session.turn,
        "difficulty": session.difficulty.value,
        "legal_moves": [m.to_dict() for m in session.legal_moves()],
        "is_game_over": session.is_game_over(),
        "result": session.result() if session.is_game_over() else None,
        "counts": session.disc_counts(),
    })
    return payload


@app.get("/games")
def list_games():
    return {
        "games": [engines[name].rules.describe() for name in GAMES],
        "difficulties": [d.value for d in Difficulty],
    }


@app.post("/best-move")
def best_move(req: BestMoveRequest):
    engine = _engine(req.game)
    try:
        state = state_from_json(req.board, req.hands)
        with _game_locks[req.game]:
            move = engine.find_best_move(req.difficulty, state, req.owner)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _move_json(move, engine.rules.size)


@app.post("/legal-moves")
def legal_moves(req: LegalMovesRequest):
    engine = _engine(req.game)
    owner = req.owner or engine.rules.human
    try:
        state = state_from_json(req.board, req.hands)
        square = tuple(req.square) if req.square is not None else None
        with _game_locks[req.game]:
            moves = engine.legal_moves(state, owner, square)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"owner": owner, "moves": [m.to_dict() for m in moves]}


@app.get("/games/{game}/board")
def get_board(game: str):
    session = _session(game)
    with _game_locks[game]:
        return _session_json(session)


@app.post("/games/{game}/move")
def make_move(game: str, req: MoveRequest):
    session = _session(game)
    with _game_locks[game]:
        try:
            if isinstance(req.move, str):
                move = parse_move(req.move, session.state, session.turn)
            else:
                move = move_from_dict(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid move: {e}")
        if not session.make_move(move):
            raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
        payload = _session_json(session)
        payload.update(_move_json(move, session.rules.size))
        return payload


@app.post("/games/{game}/search")
def search_move(game: str, req: SearchRequest = SearchRequest()):
    session = _session(game)
    with _game_locks[game]:
        if session.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        try:
            move = session.play_engine_move(req.difficulty)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        payload = _session_json(session)
        payload.update(_move_json(move, session.rules.size))
        return payload


@app.post("/games/{game}/reset")
def reset_game(game: str, req: SearchRequest = SearchRequest()):
    session = _session(game)
    with _game_locks[game]:
        try:
            if req.difficulty:
                session.difficulty = Difficulty.parse(req.difficulty)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        session.reset()
        return _session_json(session)
