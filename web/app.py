from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from flask import Flask, jsonify, request

from chessplay import (
    CONFIG,
    Config,
    Difficulty,
    GameMode,
    GameSession,
    IllegalMoveError,
    InvalidPositionError,
    MoveRecord,
    Side,
)
from chessplay.config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> Flask:
    cfg = config or CONFIG
    configure_logging(cfg.log_level)

    app = Flask(__name__)

    session = GameSession(config=cfg)
    # pvp unless a game is started in pvc mode
    match: Dict[str, GameMode] = {"mode": GameMode.PVP}
    # One mutation or search at a time
    lock = threading.Lock()

    app.config["SESSION"] = session

    def computer_to_move() -> bool:
        return (
            match["mode"] is GameMode.PVC
            and not session.is_game_over()
            and not session.is_player_turn()
        )

    def computer_reply() -> Optional[MoveRecord]:
        if not computer_to_move():
            return None
        move = session.play_best_move()
        if move is not None:
            logger.info("Computer plays %s", move.san)
        return move

    def snapshot(**extra) -> Dict[str, object]:
        snap = session.current_state().to_dict()
        snap["mode"] = match["mode"].value
        snap["difficulty"] = session.difficulty.value
        snap["player_color"] = session.player_color.value
        snap["legal_moves"] = [m.uci for m in session.legal_moves()]
        snap["evaluation"] = session.evaluation()
        snap["win_probability"] = session.win_probability().to_dict()
        snap.update(extra)
        return snap

    def error(message: str, status: int = 400):
        return jsonify({"error": message}), status

    @app.get("/api/state")
    def api_state():
        with lock:
            return jsonify(snapshot())

    @app.post("/api/new")
    def api_new():
        data = request.get_json(silent=True) or {}
        try:
            mode = GameMode((data.get("mode") or "pvc").lower())
            difficulty = Difficulty((data.get("difficulty") or session.difficulty.value).lower())
            color = Side((data.get("color") or "white").lower())
        except ValueError as exc:
            return error(str(exc))

        fen = data.get("fen")
        with lock:
            try:
                if fen:
                    session.load_position(fen)
                else:
                    session.reset()
            except InvalidPositionError as exc:
                return error(str(exc))
            match["mode"] = mode
            session.set_difficulty(difficulty)
            session.set_player_color(color)

            pre_fen = session.fen
            # If the human plays black, the computer opens
            ai_move = computer_reply()
            extra: Dict[str, object] = {"ai_move": ai_move.uci if ai_move else None}
            if ai_move is not None:
                extra["pre_fen"] = pre_fen
            return jsonify(snapshot(**extra))

    @app.post("/api/move")
    def api_move():
        payload = request.get_json(silent=True) or {}
        uci = payload.get("move")
        from_square, to_square = payload.get("from"), payload.get("to")
        if not uci and not (from_square and to_square):
            return error("Missing move")

        with lock:
            if match["mode"] is GameMode.PVC and not session.is_player_turn():
                return error("Not your turn")
            try:
                if uci:
                    move = session.apply_uci(uci)
                else:
                    move = session.apply_move(from_square, to_square, payload.get("promotion"))
            except IllegalMoveError as exc:
                return error(str(exc))

            ai_move = computer_reply()
            return jsonify(snapshot(move=move.to_dict(), ai_move=ai_move.uci if ai_move else None))

    @app.post("/api/undo")
    def api_undo():
        with lock:
            undone: List[MoveRecord] = []
            last = session.undo()
            if last is not None:
                undone.append(last)
                # Against the computer, take back the human move as well
                if match["mode"] is GameMode.PVC and not session.is_player_turn():
                    again = session.undo()
                    if again is not None:
                        undone.append(again)

            # Nothing left to take back but the computer still has the move
            ai_move = computer_reply()
            return jsonify(
                snapshot(
                    undone=[m.uci for m in undone],
                    nothing_to_undo=not undone,
                    ai_move=ai_move.uci if ai_move else None,
                )
            )

    @app.get("/api/moves")
    def api_moves():
        square = request.args.get("square")
        with lock:
            try:
                targets = session.valid_targets(square) if square else [m.uci for m in session.legal_moves()]
            except IllegalMoveError as exc:
                return error(str(exc))
            return jsonify({"square": square, "moves": targets})

    @app.get("/api/pgn")
    def api_pgn():
        with lock:
            return jsonify({"pgn": session.pgn()})

    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=True)
