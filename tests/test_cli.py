"""Tests for the command-line entry point."""

import tempfile
from pathlib import Path

import pytest

from adventure_game.__main__ import main
from adventure_game.auth import register
from adventure_game.persistence import AdventureDB


def test_seed_twice(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        db_path = str(Path(tmp) / "cli.db")
        main(["--db", db_path, "seed"])
        assert "Seeded" in capsys.readouterr().out
        main(["--db", db_path, "seed"])
        assert "Nothing to do" in capsys.readouterr().out


def test_simulate_anonymous_bots(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        db_path = str(Path(tmp) / "cli.db")
        main(["--db", db_path, "simulate", "--mode", "Jumanji", "--players", "3",
              "--accuracy", "1.0", "--seed", "7"])
        out = capsys.readouterr().out
        assert "win after" in out
        assert "bot-1" in out


def test_simulate_for_users_updates_accounts(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "cli.db"
        db = AdventureDB(db_path)
        mia = register(db, "mia", "pw", rounds=4)
        register(db, "sara", "pw", rounds=4)
        db.close()

        main(["--db", str(db_path), "simulate", "--mode", "Snakes", "--users", "mia", "sara",
              "--accuracy", "1.0", "--max-turns", "1000", "--seed", "3"])
        capsys.readouterr()

        db = AdventureDB(db_path)
        board = db.leaderboard()
        assert {r["username"] for r in board} == {"mia", "sara"}
        # the winner at least collected the win bonus
        assert board[0]["xp"] >= 50
        progress = db.load_progress(mia, "Snakes")
        assert progress is not None
        db.close()

        main(["--db", str(db_path), "leaderboard"])
        assert "mia" in capsys.readouterr().out


def test_simulate_unknown_user_exits():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(SystemExit):
            main(["--db", str(Path(tmp) / "cli.db"), "simulate", "--users", "ghost"])


def test_leaderboard_without_db_exits():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(SystemExit):
            main(["--db", str(Path(tmp) / "missing.db"), "leaderboard"])
