"""
Flask REST API for Reading Adventure.

  POST /api/register, /api/login              → accounts
  GET  /api/questions/<mode>                  → random board question
  POST /api/update-xp, /api/deduct-xp         → xp bookkeeping
  POST /api/save-progress, GET /api/progress  → saved board position
  GET  /api/story-*, POST /api/update-story-progress → story mode
  GET  /api/leaderboard, /api/user/<id>       → stats
  POST /api/move, /api/score-word, /api/grade-episode → progression engine
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, current_app, g, jsonify, request
from flask_cors import CORS

from adventure_game.auth import InvalidCredentialsError, authenticate, register
from adventure_game.board import PlayerState
from adventure_game.engine import GameMode, Move, ProgressionEngine
from adventure_game.levels import add_xp, deduct_xp, level_of
from adventure_game.persistence import (
    AdventureDB,
    PersistenceError,
    UnknownUserError,
    UsernameTakenError,
)
from adventure_game.scoring import grade_episode, score_word

logger = logging.getLogger(__name__)


class BadInput(ValueError):
    """Raised for a missing or malformed request field."""


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

def get_db() -> AdventureDB:
    if "db" not in g:
        g.db = AdventureDB(current_app.config["DB_PATH"])
    return g.db


def _close_db(exc: BaseException | None = None) -> None:
    db = g.pop("db", None)
    if db is not None:
        db.close()


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _field(data: dict, key: str):
    if data.get(key) is None:
        raise BadInput(f"Missing field: {key}")
    return data[key]


def _int_field(data: dict, key: str) -> int:
    value = _field(data, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadInput(f"Field {key} must be an integer")
    return value


def _mode(value: str) -> GameMode:
    try:
        return GameMode(value)
    except ValueError:
        raise BadInput(f"Unknown game mode: {value}") from None


def _require_user(db: AdventureDB, user_id: int):
    user = db.load_user(user_id)
    if user is None:
        raise UnknownUserError(f"No user with id {user_id}")
    return user


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(db_path: Path | str, seed: bool = True) -> Flask:
    app = Flask(__name__)
    CORS(app)  # the browser client is served from another origin
    app.config["DB_PATH"] = str(db_path)
    app.config.setdefault("BCRYPT_ROUNDS", 10)

    if seed:
        db = AdventureDB(db_path)
        try:
            db.seed_content()
        finally:
            db.close()

    app.teardown_appcontext(_close_db)
    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(UsernameTakenError)
    def _taken(e):
        return jsonify({"error": "Username already exists"}), 400

    @app.errorhandler(InvalidCredentialsError)
    def _bad_login(e):
        return jsonify({"error": "Invalid username or password"}), 401

    @app.errorhandler(UnknownUserError)
    def _unknown_user(e):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ValueError)
    def _bad_value(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(PersistenceError)
    def _persistence(e):
        logger.error("Persistence failure on %s: %s", request.path, e)
        status = 503 if e.retryable else 500
        return jsonify({"error": str(e), "retryable": e.retryable}), status


def _register_routes(app: Flask) -> None:

    # ── Accounts ──

    @app.post("/api/register")
    def register_user():
        data = _body()
        username = str(_field(data, "username"))
        password = str(_field(data, "password"))
        try:
            register(get_db(), username, password, current_app.config["BCRYPT_ROUNDS"])
        except InvalidCredentialsError as e:
            raise BadInput(str(e)) from e
        return jsonify({"message": "Account created successfully!"}), 201

    @app.post("/api/login")
    def login():
        data = _body()
        user = authenticate(get_db(), str(data.get("username") or ""), str(data.get("password") or ""))
        return jsonify({
            "id": user.id,
            "username": user.username,
            "xp": user.xp,
            "level": level_of(user.xp),
        })

    # ── Board questions & sessions ──

    @app.get("/api/questions/<mode>")
    def question(mode: str):
        return jsonify(get_db().random_question(mode))

    @app.post("/api/game-session")
    def game_session():
        data = _body()
        mode = str(_field(data, "mode"))
        players = _field(data, "players")
        if not isinstance(players, list) or not players \
                or not all(isinstance(p, dict) for p in players):
            raise BadInput("players must be a non-empty list of {id} objects")
        user_ids = [_int_field(p, "id") for p in players]
        db = get_db()
        for uid in user_ids:
            _require_user(db, uid)
        session_id = db.create_game_session(mode, user_ids)
        return jsonify({"sessionId": session_id, "message": "Game session created!"})

    # ── XP ──

    @app.post("/api/update-xp")
    def update_xp():
        data = _body()
        user_id = _int_field(data, "userId")
        gained = _int_field(data, "xpGained")
        db = get_db()
        user = _require_user(db, user_id)
        new_xp = add_xp(user.xp, gained)
        new_level = level_of(new_xp)
        db.update_user_xp(user_id, new_xp, new_level)
        return jsonify({"success": True, "newXp": new_xp, "newLevel": new_level,
                        "leveledUp": new_level > level_of(user.xp)})

    @app.post("/api/deduct-xp")
    def remove_xp():
        data = _body()
        user_id = _int_field(data, "userId")
        deducted = _int_field(data, "xpDeducted")
        db = get_db()
        user = _require_user(db, user_id)
        new_xp = deduct_xp(user.xp, deducted)
        new_level = level_of(new_xp)
        db.update_user_xp(user_id, new_xp, new_level)
        return jsonify({"success": True, "newXp": new_xp, "newLevel": new_level})

    # ── Board progress ──

    @app.post("/api/save-progress")
    def save_progress():
        data = _body()
        user_id = _int_field(data, "userId")
        mode = str(_field(data, "gameMode"))
        position = _int_field(data, "position")
        xp_earned = _int_field(data, "xpEarned")
        if not 1 <= position <= 100:
            raise BadInput("position must be within 1..100")
        if xp_earned < 0:
            raise BadInput("xpEarned must not be negative")
        db = get_db()
        _require_user(db, user_id)
        db.save_progress(user_id, mode, position, xp_earned)
        return jsonify({"success": True})

    @app.get("/api/progress/<int:user_id>/<mode>")
    def progress(user_id: int, mode: str):
        saved = get_db().load_progress(user_id, mode)
        if saved is None:
            return jsonify({"position": 1, "xp_earned": 0})
        return jsonify({
            "user_id": saved.user_id,
            "game_mode": saved.game_mode,
            "position": saved.position,
            "xp_earned": saved.xp_earned,
            "last_played": saved.last_played,
        })

    # ── Story mode ──

    @app.get("/api/story-progress/<int:user_id>")
    def story_progress(user_id: int):
        db = get_db()
        _require_user(db, user_id)
        p = db.story_progress(user_id)
        return jsonify({
            "user_id": p.user_id,
            "current_episode": p.current_episode,
            "completed_episodes": p.completed_episodes,
            "total_stars": p.total_stars,
        })

    @app.get("/api/story-episode/<int:episode_number>")
    def story_episode(episode_number: int):
        found = get_db().story_episode(episode_number)
        if found is None:
            return jsonify({"error": f"No episode {episode_number}"}), 404
        episode, quizzes = found
        return jsonify({"episode": episode, "quizzes": quizzes})

    @app.post("/api/update-story-progress")
    def update_story_progress():
        data = _body()
        user_id = _int_field(data, "userId")
        episode_number = _int_field(data, "episodeNumber")
        db = get_db()
        _require_user(db, user_id)

        if data.get("correctCount") is not None:
            found = db.story_episode(episode_number)
            if found is None:
                return jsonify({"error": f"No episode {episode_number}"}), 404
            grade = grade_episode(_int_field(data, "correctCount"), found[0]["xp_reward"])
            stars, xp_earned = grade.stars, grade.xp_earned
        else:
            stars = _int_field(data, "starsEarned")
            xp_earned = _int_field(data, "xpEarned")
            if stars < 0 or xp_earned < 0:
                raise BadInput("starsEarned and xpEarned must not be negative")

        user = db.record_episode_completion(user_id, episode_number, stars, xp_earned)
        return jsonify({"success": True, "newXp": user.xp, "newLevel": user.level,
                        "starsEarned": stars, "xpEarned": xp_earned})

    # ── Stats ──

    @app.get("/api/leaderboard")
    def leaderboard():
        return jsonify(get_db().leaderboard())

    @app.get("/api/user/<int:user_id>")
    def user_stats(user_id: int):
        user = _require_user(get_db(), user_id)
        return jsonify({"username": user.username, "xp": user.xp, "level": user.level})

    # ── Progression engine ──

    @app.post("/api/move")
    def move():
        data = _body()
        mode = _mode(str(data.get("mode", GameMode.SNAKES.value)))
        position = _int_field(data, "position")
        steps = _int_field(data, "steps")
        if not 1 <= position <= 100:
            raise BadInput("position must be within 1..100")
        xp = _int_field(data, "xp") if data.get("xp") is not None else 0
        if xp < 0:
            raise BadInput("xp must not be negative")
        state = PlayerState(position=position, xp=xp)
        transition = ProgressionEngine(mode).apply(state, Move(steps))
        moved = transition.events[0]
        return jsonify({
            "start": moved.start,
            "landed": moved.landed,
            "position": transition.state.position,
            "jump": moved.jump,
            "won": transition.won,
            "xp": transition.state.xp,
            "level": transition.state.level,
        })

    @app.post("/api/score-word")
    def score_word_route():
        data = _body()
        result = score_word(
            str(_field(data, "assembled")),
            str(_field(data, "target")),
            _int_field(data, "timeRemaining"),
        )
        return jsonify({
            "correct": result.correct,
            "timedOut": result.timed_out,
            "speedBonus": result.speed_bonus,
            "steps": result.steps,
            "xp": result.xp,
        })

    @app.post("/api/grade-episode")
    def grade_episode_route():
        data = _body()
        grade = grade_episode(_int_field(data, "correctCount"), _int_field(data, "baseReward"))
        return jsonify({"stars": grade.stars, "xpEarned": grade.xp_earned})
