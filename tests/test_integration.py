"""
Integration test suite for the tablegames engines.

Tests components working together end-to-end:
- Full game simulations (engine vs engine, every game)
- GameSession turn order, passes, undo and results
- FastAPI REST API integration
- Terminal CLI loop with scripted input
"""

import random
import threading

import pytest

from tablegames.core.board import BoardMove, BoardState, Piece, Placement, state_to_json
from tablegames.core.errors import IllegalMoveError
from tablegames.core.policy import Difficulty
from tablegames.engine import Engine
from tablegames.session import GameSession


def make_state(size, occupants, hands=None):
    rows = [[None] * size for _ in range(size)]
    for (row, col), occupant in occupants.items():
        rows[row][col] = occupant
    return BoardState.from_rows(rows, hands)


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE VS ENGINE — FULL GAME SIMULATIONS
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    """The engines can play complete games without producing illegal moves."""

    def _play_out(self, session, max_plies):
        plies = 0
        while not session.is_game_over() and plies < max_plies:
            legal = session.legal_moves()
            move = session.play_engine_move()
            if move is None:
                break
            assert move in legal, f"Illegal move {move} at ply {plies}"
            plies += 1
        return plies

    def test_reversi_normal_vs_normal_finishes(self):
        """Reversi always ends: every placement fills a cell."""
        session = GameSession("reversi", "normal")
        self._play_out(session, max_plies=64)
        assert session.is_game_over()
        counts = session.disc_counts()
        assert sum(counts.values()) <= 64
        assert session.result() in ("white wins", "black wins", "draw")

    def test_reversi_easy_vs_hard(self):
        session = GameSession("reversi", "easy", engine=Engine("reversi", depth=1, rng=random.Random(3)))
        plies = 0
        while not session.is_game_over() and plies < 64:
            level = "easy" if session.turn == session.rules.human else "hard"
            assert session.play_engine_move(level) is not None
            plies += 1
        assert session.is_game_over()

    def test_shogi_engine_vs_engine(self):
        session = GameSession("shogi", "normal", engine=Engine("shogi", depth=1))
        plies = self._play_out(session, max_plies=120)
        assert plies > 10 or session.is_game_over()
        for side in session.rules.sides:
            assert all(kind in session.rules.kinds for kind in session.state.hand(side))

    def test_chess_engine_vs_engine(self):
        session = GameSession("chess", "hard", engine=Engine("chess", depth=1))
        plies = self._play_out(session, max_plies=60)
        assert plies > 10 or session.is_game_over()
        if session.is_game_over():
            assert session.result().endswith("wins")

    def test_shogi_captures_feed_drops(self):
        """A captured piece can be dropped back on the next turn."""
        session = GameSession("shogi")
        session.state = make_state(5, {
            (0, 0): Piece("K", "ai"),
            (3, 3): Piece("G", "ai"),
            (4, 2): Piece("G", "player"),
            (4, 4): Piece("K", "player"),
        }, {"ai": [], "player": []})
        assert session.make_move(BoardMove((4, 2), (3, 3)))
        assert session.state.hand("player") == ("G",)
        assert session.captured["player"] == [Piece("G", "ai")]
        session.play_engine_move()
        drops = [m for m in session.legal_moves() if not isinstance(m, BoardMove)]
        assert drops and all(m.kind == "G" for m in drops)


# ════════════════════════════════════════════════════════════════════════════
#  GAME SESSION
# ════════════════════════════════════════════════════════════════════════════


class TestGameSession:
    def test_initial_turns(self):
        assert GameSession("chess").turn == "white"
        assert GameSession("reversi").turn == "black"
        assert GameSession("shogi").turn == "player"

    def test_make_move_switches_turn(self):
        session = GameSession("chess")
        assert session.make_move(BoardMove((6, 4), (4, 4)))
        assert session.turn == "black"
        assert session.history == [BoardMove((6, 4), (4, 4))]

    def test_illegal_move_rejected(self):
        session = GameSession("chess")
        assert not session.make_move(BoardMove((6, 4), (3, 4)))
        assert not session.make_move(BoardMove((1, 4), (3, 4)))
        assert not session.make_move(Placement((4, 4)))
        assert session.turn == "white"
        assert session.history == []

    def test_reversi_pass(self):
        """White has no reply, so black moves again and a pass is recorded."""
        session = GameSession("reversi")
        session.state = make_state(8, {
            (0, 0): "black", (0, 1): "white",
            (7, 0): "black", (7, 1): "white",
        })
        assert session.make_move(Placement((0, 2)))
        assert session.history == [Placement((0, 2)), None]
        assert session.turn == "black"
        assert not session.is_game_over()
        assert session.legal_moves() == [Placement((7, 2))]

    def test_undo_removes_move_and_pass(self):
        session = GameSession("reversi")
        start = make_state(8, {
            (0, 0): "black", (0, 1): "white",
            (7, 0): "black", (7, 1): "white",
        })
        session.state = start
        session.make_move(Placement((0, 2)))
        session.undo_move()
        assert session.state == start
        assert session.history == []
        assert session.turn == "black"

    def test_undo_restores_captures(self):
        session = GameSession("chess")
        for move in (BoardMove((6, 4), (4, 4)), BoardMove((1, 3), (3, 3)), BoardMove((4, 4), (3, 3))):
            assert session.make_move(move)
        assert session.captured["white"] == [Piece("P", "black")]
        session.undo_move()
        assert session.captured["white"] == []
        assert session.turn == "white"
        assert len(session.history) == 2

    def test_undo_on_fresh_session(self):
        session = GameSession("shogi")
        session.undo_move()
        assert session.state == session.rules.initial_state()

    def test_king_capture_ends_game(self):
        session = GameSession("chess")
        session.state = make_state(8, {
            (0, 0): Piece("K", "black"),
            (4, 0): Piece("R", "white"),
            (7, 7): Piece("K", "white"),
        })
        assert session.make_move(BoardMove((4, 0), (0, 0)))
        assert session.is_game_over()
        assert session.winner() == "white"
        assert session.result() == "white wins"
        assert session.legal_moves() == []
        assert session.play_engine_move() is None
        assert not session.make_move(BoardMove((7, 7), (6, 7)))

    def test_no_moves_loses(self):
        session = GameSession("chess")
        session.state = make_state(8, {
            (0, 7): Piece("K", "black"),
            (7, 0): Piece("K", "white"),
            (7, 1): Piece("P", "white"),
            (6, 0): Piece("P", "white"),
            (6, 1): Piece("P", "white"),
        })
        # white pawns on rank 2 can still advance
        assert not session.is_game_over()
        session.state = make_state(8, {
            (0, 7): Piece("K", "black"),
            (0, 0): Piece("K", "white"),
            (0, 1): Piece("P", "white"),
            (1, 0): Piece("P", "white"),
            (1, 1): Piece("P", "white"),
        })
        assert session.is_game_over()
        assert session.winner() == "black"

    def test_reversi_draw(self):
        session = GameSession("reversi")
        session.state = make_state(8, {(0, 0): "white", (7, 7): "black"})
        assert session.is_game_over()
        assert session.result() == "draw"

    def test_history_owner_counts_passes(self):
        session = GameSession("reversi")
        assert session.history_owner(0) == "black"
        assert session.history_owner(1) == "white"
        assert session.history_owner(2) == "black"

    def test_engine_move_logged_side(self, caplog):
        session = GameSession("reversi", "normal")
        session.make_move(Placement((2, 3)))
        with caplog.at_level("INFO", logger="tablegames.session"):
            move = session.play_engine_move()
        assert move is not None
        assert "white plays" in caplog.text

    def test_unknown_difficulty(self):
        with pytest.raises(ValueError):
            GameSession("chess", "grandmaster")

    def test_engine_illegal_move_raises(self, monkeypatch):
        session = GameSession("chess")
        monkeypatch.setattr(session.engine, "find_best_move",
                            lambda *args, **kwargs: BoardMove((6, 4), (2, 4)))
        with pytest.raises(IllegalMoveError):
            session.play_engine_move()


# ════════════════════════════════════════════════════════════════════════════
#  FASTAPI REST API
# ════════════════════════════════════════════════════════════════════════════


class TestAPIIntegration:
    """Tests FastAPI REST API endpoints."""

    @pytest.fixture(autouse=True)
    def setup_client(self):
        from fastapi.testclient import TestClient
        from interface.api import app, engines, sessions

        self.client = TestClient(app)
        self.engines = engines
        self.sessions = sessions
        # Reset state before each test
        for session in sessions.values():
            session.difficulty = Difficulty.NORMAL
            session.reset()

    def _position(self, game, state=None, **extra):
        rules = self.engines[game].rules
        payload = state_to_json(state or rules.initial_state())
        payload.update(game=game, **extra)
        return payload

    def test_list_games(self):
        response = self.client.get("/games")
        assert response.status_code == 200
        data = response.json()
        assert [g["name"] for g in data["games"]] == ["chess", "reversi", "shogi"]
        assert data["difficulties"] == ["easy", "normal", "hard"]

    def test_best_move_reversi(self):
        response = self.client.post("/best-move", json=self._position("reversi", difficulty="normal"))
        assert response.status_code == 200
        data = response.json()
        assert data["move"] == {"position": [2, 4]}
        assert data["notation"] == "e6"

    def test_best_move_hard_takes_king(self):
        state = make_state(8, {
            (0, 0): Piece("K", "black"),
            (4, 4): Piece("Q", "black"),
            (4, 7): Piece("K", "white"),
        })
        response = self.client.post("/best-move", json=self._position("chess", state, difficulty="hard"))
        assert response.status_code == 200
        assert response.json()["move"] == {"from": [4, 4], "to": [4, 7]}

    def test_best_move_for_human_side(self):
        payload = self._position("shogi", owner="player")
        response = self.client.post("/best-move", json=payload)
        assert response.status_code == 200
        move = response.json()["move"]
        assert move["from"][0] == 4

    def test_best_move_waits_for_game_lock(self):
        """Stateless searches share the game's engine, so they queue behind its lock."""
        from interface.api import _game_locks

        payload = self._position("reversi")
        results = []
        worker = threading.Thread(
            target=lambda: results.append(self.client.post("/best-move", json=payload))
        )
        with _game_locks["reversi"]:
            worker.start()
            worker.join(timeout=0.5)
            assert results == []
        worker.join(timeout=30)
        assert results[0].status_code == 200
        assert results[0].json()["move"] == {"position": [2, 4]}

    def test_best_move_no_moves(self):
        state = make_state(8, {(0, 0): "black", (0, 1): "white"})
        response = self.client.post("/best-move", json=self._position("reversi", state))
        assert response.status_code == 200
        assert response.json() == {"move": None, "notation": None}

    def test_best_move_unknown_game(self):
        response = self.client.post("/best-move", json={"game": "go", "board": [[None]]})
        assert response.status_code == 404

    def test_best_move_unknown_difficulty(self):
        response = self.client.post("/best-move", json=self._position("chess", difficulty="insane"))
        assert response.status_code == 400

    def test_best_move_unknown_piece(self):
        payload = self._position("chess")
        payload["board"][4][4] = {"type": "X", "owner": "white"}
        response = self.client.post("/best-move", json=payload)
        assert response.status_code == 400

    def test_best_move_wrong_board_size(self):
        rules = self.engines["shogi"].rules
        payload = self._position("chess", rules.initial_state())
        response = self.client.post("/best-move", json=payload)
        assert response.status_code == 400

    def test_legal_moves_for_square(self):
        response = self.client.post("/legal-moves", json=self._position("chess", square=[6, 4]))
        assert response.status_code == 200
        data = response.json()
        assert data["owner"] == "white"
        assert data["moves"] == [{"from": [6, 4], "to": [5, 4]}, {"from": [6, 4], "to": [4, 4]}]

    def test_legal_moves_with_drops(self):
        rules = self.engines["shogi"].rules
        state = rules.initial_state().replace({}, {"ai": ["G"], "player": []})
        response = self.client.post("/legal-moves", json=self._position("shogi", state, owner="ai"))
        moves = response.json()["moves"]
        assert len(moves) == 13 + 15
        assert moves[-1] == {"pieceType": "G", "position": [3, 4], "inventoryIndex": 0}

    def test_get_board_initial(self):
        response = self.client.get("/games/reversi/board")
        assert response.status_code == 200
        data = response.json()
        assert data["turn"] == "black"
        assert data["is_game_over"] is False
        assert data["result"] is None
        assert data["counts"] == {"white": 2, "black": 2}
        assert len(data["legal_moves"]) == 4

    def test_get_board_shogi_hands(self):
        data = self.client.get("/games/shogi/board").json()
        assert data["hands"] == {"ai": [], "player": []}
        assert data["board"][0][2] == {"type": "K", "owner": "ai"}

    def test_unknown_session(self):
        assert self.client.get("/games/go/board").status_code == 404

    def test_post_move_notation(self):
        response = self.client.post("/games/reversi/move", json={"move": "d6"})
        assert response.status_code == 200
        data = response.json()
        assert data["move"] == {"position": [2, 3]}
        assert data["turn"] == "white"
        assert data["counts"] == {"white": 1, "black": 4}

    def test_post_move_dict(self):
        response = self.client.post("/games/chess/move", json={"move": {"from": [6, 4], "to": [4, 4]}})
        assert response.status_code == 200
        assert response.json()["notation"] == "e2e4"

    def test_post_move_illegal(self):
        response = self.client.post("/games/reversi/move", json={"move": "d3"})
        assert response.status_code == 400

    def test_post_move_invalid_format(self):
        response = self.client.post("/games/chess/move", json={"move": "zzzz"})
        assert response.status_code == 400

    def test_search_returns_move(self):
        self.client.post("/games/chess/move", json={"move": "e2e4"})
        response = self.client.post("/games/chess/search", json={"difficulty": "normal"})
        assert response.status_code == 200
        data = response.json()
        assert data["move"] is not None
        assert data["turn"] == "white"

    def test_search_without_body(self):
        response = self.client.post("/games/shogi/search")
        assert response.status_code == 200
        assert response.json()["turn"] == "ai"

    def test_search_game_over_returns_400(self):
        session = self.sessions["chess"]
        session.state = session.rules.initial_state().replace({(0, 4): None})
        response = self.client.post("/games/chess/search")
        assert response.status_code == 400

    def test_reset_board(self):
        self.client.post("/games/chess/move", json={"move": "e2e4"})
        response = self.client.post("/games/chess/reset", json={"difficulty": "easy"})
        assert response.status_code == 200
        data = response.json()
        assert data["turn"] == "white"
        assert data["difficulty"] == "easy"
        assert len(data["legal_moves"]) == 20

    def test_reset_bad_difficulty(self):
        response = self.client.post("/games/chess/reset", json={"difficulty": "insane"})
        assert response.status_code == 400

    def test_full_api_game_flow(self):
        """Play a few moves via API and verify state consistency."""
        r = self.client.get("/games/shogi/board")
        assert r.json()["turn"] == "player"

        r = self.client.post("/games/shogi/move", json={"move": "c1c2"})
        assert r.status_code == 200
        assert r.json()["turn"] == "ai"

        r = self.client.post("/games/shogi/search")
        assert r.json()["move"] is not None
        assert r.json()["turn"] == "player"

        self.client.post("/games/shogi/reset")
        r = self.client.get("/games/shogi/board")
        assert r.json()["board"][4][2] == {"type": "K", "owner": "player"}


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL CLI
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    def _run(self, session, inputs):
        from interface.cli import play

        lines = iter(inputs)
        out = []
        result = play(session, read=lambda prompt: next(lines), write=out.append)
        return result, "\n".join(out)

    def test_quit(self):
        result, out = self._run(GameSession("chess"), ["quit"])
        assert result == "*"
        assert "Game abandoned" in out
        assert "a b c d e f g h" in out

    def test_invalid_then_quit(self):
        result, out = self._run(GameSession("chess"), ["zz9", "exit"])
        assert "Invalid input" in out
        assert result == "*"

    def test_illegal_then_quit(self):
        result, out = self._run(GameSession("reversi"), ["a1", "quit"])
        assert "Illegal move" in out

    def test_human_move_and_engine_reply(self):
        session = GameSession("reversi", "normal")
        result, out = self._run(session, ["d6", "quit"])
        assert "Engine plays:" in out
        assert len(session.history) == 2

    def test_finished_game_prints_result(self):
        session = GameSession("chess")
        session.state = session.rules.initial_state().replace({(0, 4): None})
        result, out = self._run(session, [])
        assert result == "white wins"
        assert "Game Over" in out
        assert "Result: white wins" in out

    def test_bad_game_argument(self):
        from interface.cli import main

        with pytest.raises(SystemExit):
            main(["--game", "go"])

    def test_zero_depth_argument(self):
        from interface.cli import main

        with pytest.raises(SystemExit):
            main(["--game", "chess", "--depth", "0"])
