"""Tests for the SQLite persistence layer."""

import sqlite3
import tempfile
from pathlib import Path

import pytest

from adventure_game.board import PlayerState
from adventure_game.engine import CorrectAnswer
from adventure_game.game import LogEntry
from adventure_game.persistence import (
    AdventureDB,
    PersistenceError,
    SessionRecorder,
    UnknownUserError,
    UsernameTakenError,
    retry_with_backoff,
)


def test_create_db():
    """Creating a DB initializes the schema."""
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "nested" / "test.db"
        AdventureDB(db_path).close()
        conn = sqlite3.connect(db_path)
        tables = {r[0] for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()}
        conn.close()
        for name in ("users", "game_sessions", "session_players", "questions",
                     "reading_materials", "user_progress", "story_episodes",
                     "story_quizzes", "user_story_progress"):
            assert name in tables


# ── content ──────────────────────────────────────────────────────────

def test_seed_content_once():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        assert db.seed_content() is True
        assert db.seed_content() is False


def test_random_question_by_category():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        db.seed_content()
        q = db.random_question("Scrabble")
        assert q is not None
        assert q["category"] == "Scrabble"
        assert q["material_title"] == "Word Magic"
        assert isinstance(q["distractors"], list)
        assert len(q["distractors"]) == 3
        assert db.random_question("Chess") is None


def test_story_episode_with_quizzes():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        db.seed_content()
        episode, quizzes = db.story_episode(1)
        assert episode["title"] == "The Mysterious Forest"
        assert episode["xp_reward"] == 30
        assert len(quizzes) == 4
        assert quizzes[0]["correct_answer"] == "A glowing map"
        assert db.story_episode(99) is None


# ── users ────────────────────────────────────────────────────────────

def test_create_and_load_user():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        user = db.load_user(uid)
        assert user.username == "mia"
        assert user.xp == 0
        assert user.level == 1
        assert db.get_user_by_username("mia").id == uid
        assert db.get_user_by_username("nobody") is None


def test_duplicate_username():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        db.create_user("mia", "hash")
        with pytest.raises(UsernameTakenError):
            db.create_user("mia", "other")
        # the connection is still usable afterwards
        db.create_user("sara", "hash")


def test_update_user_xp():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        db.update_user_xp(uid, 520, 3)
        user = db.load_user(uid)
        assert (user.xp, user.level) == (520, 3)
        with pytest.raises(UnknownUserError):
            db.update_user_xp(uid + 100, 10, 1)


def test_leaderboard_order():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        for name, xp in [("a", 100), ("b", 300), ("c", 100), ("d", 50)]:
            db.update_user_xp(db.create_user(name, "h"), xp, 1)
        board = db.leaderboard(limit=3)
        assert [r["username"] for r in board] == ["b", "a", "c"]
        assert set(board[0]) == {"username", "xp", "level"}


# ── board progress ───────────────────────────────────────────────────

def test_progress_upsert():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        assert db.load_progress(uid, "Snakes") is None

        db.save_progress(uid, "Snakes", 42, 30)
        db.save_progress(uid, "Snakes", 57, 45)
        db.save_progress(uid, "Jumanji", 9, 10)

        snakes = db.load_progress(uid, "Snakes")
        assert (snakes.position, snakes.xp_earned) == (57, 45)
        assert db.load_progress(uid, "Jumanji").position == 9
        rows = db._conn.execute("SELECT COUNT(*) FROM user_progress").fetchone()[0]
        assert rows == 2


# ── story progress ───────────────────────────────────────────────────

def test_story_progress_starts_at_episode_one():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        progress = db.story_progress(uid)
        assert progress.current_episode == 1
        assert progress.completed_episodes == []
        assert progress.total_stars == 0


def test_record_episode_completion():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        db.update_user_xp(uid, 150, 1)

        user = db.record_episode_completion(uid, 1, stars=3, xp_earned=90)
        assert user.xp == 240
        assert user.level == 2

        # zero stars still advances
        db.record_episode_completion(uid, 2, stars=0, xp_earned=0)
        progress = db.story_progress(uid)
        assert progress.current_episode == 3
        assert progress.completed_episodes == [1, 2]
        assert progress.total_stars == 3


def test_replaying_episode_does_not_duplicate():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        uid = db.create_user("mia", "hash")
        db.record_episode_completion(uid, 1, stars=1, xp_earned=30)
        db.record_episode_completion(uid, 1, stars=2, xp_earned=60)
        assert db.story_progress(uid).completed_episodes == [1]


def test_story_progress_unknown_user():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        with pytest.raises(UnknownUserError):
            db.story_progress(5)
        with pytest.raises(UnknownUserError):
            db.record_episode_completion(5, 1, stars=3, xp_earned=90)


# ── game sessions ────────────────────────────────────────────────────

def test_game_session_lifecycle():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        a = db.create_user("a", "h")
        b = db.create_user("b", "h")
        sid = db.create_game_session("Snakes", [a, b])

        session = db.game_session(sid)
        assert session["number_of_players"] == 2
        assert session["status"] == "active"
        assert [p["user_id"] for p in session["players"]] == [a, b]
        assert all(p["position"] == 1 for p in session["players"])

        db.update_session_player(sid, 1, position=14, score=10)
        db.update_game_session(sid, 0, "finished")
        session = db.game_session(sid)
        assert session["players"][1]["position"] == 14
        assert session["status"] == "finished"
        assert db.game_session(sid + 1) is None


def test_game_session_with_unknown_player():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        a = db.create_user("a", "h")
        with pytest.raises(UnknownUserError):
            db.create_game_session("Snakes", [a, a + 50])
        # nothing half-written
        assert db._conn.execute("SELECT COUNT(*) FROM game_sessions").fetchone()[0] == 0


def test_session_recorder_mirrors_turns():
    with tempfile.TemporaryDirectory() as tmp:
        db = AdventureDB(Path(tmp) / "test.db")
        a = db.create_user("a", "h")
        b = db.create_user("b", "h")
        sid = db.create_game_session("Jumanji", [a, b])
        recorder = SessionRecorder(db, sid)

        recorder.on_action(LogEntry(
            turn_number=1, player=0, question_id=1, answer="map", correct=True,
            event=CorrectAnswer(), state_before=PlayerState(),
            state_after=PlayerState(position=4, xp=10, session_xp=10), next_player=1,
        ))
        session = db.game_session(sid)
        assert session["current_turn_index"] == 1
        assert session["players"][0]["position"] == 4
        assert session["players"][0]["score"] == 10
        assert session["status"] == "active"


# ── retries ──────────────────────────────────────────────────────────

def test_retry_succeeds_after_busy():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise sqlite3.OperationalError("database is locked")
        return "ok"

    assert retry_with_backoff(flaky, max_attempts=3, base_delay=0) == "ok"
    assert len(calls) == 3


def test_retry_gives_up_as_retryable():
    def locked():
        raise sqlite3.OperationalError("database is locked")

    with pytest.raises(PersistenceError) as exc:
        retry_with_backoff(locked, max_attempts=2, base_delay=0)
    assert exc.value.retryable


def test_other_errors_are_not_retried():
    calls = []

    def broken():
        calls.append(1)
        raise sqlite3.OperationalError("no such table: nope")

    with pytest.raises(PersistenceError) as exc:
        retry_with_backoff(broken, base_delay=0)
    assert not exc.value.retryable
    assert len(calls) == 1
