"""SQLite persistence for players, saved progress, story progress and content.

Locked/busy database errors are retried with exponential backoff before
surfacing as a retryable ``PersistenceError``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from adventure_game.board import START_TILE
from adventure_game.content import EPISODES, MATERIALS
from adventure_game.levels import level_of

if TYPE_CHECKING:
    from adventure_game.game import LogEntry

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a database operation fails."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""


class UnknownUserError(LookupError):
    """Raised when an xp or progress update targets a missing user."""


@dataclass
class UserRecord:
    id: int
    username: str
    password_hash: str
    xp: int
    level: int


@dataclass
class SavedProgress:
    user_id: int
    game_mode: str
    position: int
    xp_earned: int
    last_played: str | None = None


@dataclass
class StoryProgress:
    user_id: int
    current_episode: int = 1
    completed_episodes: list[int] = field(default_factory=list)
    total_stars: int = 0


def _is_busy(exc: sqlite3.Error) -> bool:
    msg = str(exc).lower()
    return "locked" in msg or "busy" in msg


def retry_with_backoff(
    func: Callable[[], Any],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> Any:
    """Run *func*, retrying locked-database errors with delays of 1x, 2x, 4x *base_delay*."""
    for attempt in range(max_attempts):
        try:
            return func()
        except sqlite3.OperationalError as e:
            if not _is_busy(e):
                raise PersistenceError(f"Database operation failed: {e}") from e
            if attempt == max_attempts - 1:
                raise PersistenceError(
                    f"Database busy after {max_attempts} attempts", retryable=True,
                ) from e
            wait = base_delay * 2 ** attempt
            logger.warning("Database busy, retrying in %.2fs (attempt %d)", wait, attempt + 1)
            time.sleep(wait)
        except sqlite3.Error as e:
            raise PersistenceError(f"Database operation failed: {e}") from e

    raise PersistenceError(f"Database busy after {max_attempts} attempts", retryable=True)


class AdventureDB:
    """Thin wrapper around the game's SQLite database."""

    def __init__(self, path: Path | str, retry_attempts: int = 3, retry_delay: float = 0.1):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._conn = sqlite3.connect(self.path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                username        TEXT NOT NULL UNIQUE,
                password_hash   TEXT NOT NULL,
                xp              INTEGER NOT NULL DEFAULT 0,
                level           INTEGER NOT NULL DEFAULT 1
            );
            CREATE TABLE IF NOT EXISTS game_sessions (
                id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                mode                TEXT NOT NULL,
                number_of_players   INTEGER NOT NULL,
                current_turn_index  INTEGER NOT NULL DEFAULT 0,
                status              TEXT NOT NULL DEFAULT 'active',
                created_at          TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            CREATE TABLE IF NOT EXISTS session_players (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id  INTEGER NOT NULL REFERENCES game_sessions(id),
                user_id     INTEGER NOT NULL REFERENCES users(id),
                position    INTEGER NOT NULL DEFAULT 1,
                score       INTEGER NOT NULL DEFAULT 0,
                turn_order  INTEGER NOT NULL,
                UNIQUE(session_id, turn_order)
            );
            CREATE TABLE IF NOT EXISTS reading_materials (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                title       TEXT NOT NULL,
                content     TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS questions (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                material_id     INTEGER REFERENCES reading_materials(id),
                category        TEXT NOT NULL,
                difficulty      INTEGER NOT NULL,
                question_text   TEXT NOT NULL,
                correct_answer  TEXT NOT NULL,
                content         TEXT,
                distractors     TEXT NOT NULL DEFAULT ''
            );
            CREATE TABLE IF NOT EXISTS user_progress (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id     INTEGER NOT NULL REFERENCES users(id),
                game_mode   TEXT NOT NULL,
                position    INTEGER NOT NULL DEFAULT 1,
                xp_earned   INTEGER NOT NULL DEFAULT 0,
                last_played TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(user_id, game_mode)
            );
            CREATE TABLE IF NOT EXISTS story_episodes (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                episode_number  INTEGER NOT NULL UNIQUE,
                title           TEXT NOT NULL,
                content         TEXT NOT NULL,
                image_url       TEXT,
                xp_reward       INTEGER NOT NULL DEFAULT 20
            );
            CREATE TABLE IF NOT EXISTS story_quizzes (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                episode_id      INTEGER NOT NULL REFERENCES story_episodes(id),
                question_text   TEXT NOT NULL,
                correct_answer  TEXT NOT NULL,
                option_a        TEXT NOT NULL,
                option_b        TEXT NOT NULL,
                option_c        TEXT NOT NULL,
                option_d        TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS user_story_progress (
                id                  INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id             INTEGER NOT NULL UNIQUE REFERENCES users(id),
                current_episode     INTEGER NOT NULL DEFAULT 1,
                completed_episodes  TEXT NOT NULL DEFAULT '[]',
                total_stars         INTEGER NOT NULL DEFAULT 0
            );
        """)
        self._conn.commit()

    def _run(self, func: Callable[[], Any]) -> Any:
        return retry_with_backoff(func, self.retry_attempts, self.retry_delay)

    # ── Content ─────────────────────────────────────────────────────

    def seed_content(self) -> bool:
        """Insert the bundled materials, questions and episodes into empty tables.

        Returns True if anything was inserted.
        """
        def _seed() -> bool:
            seeded = False
            with self._conn:
                count = self._conn.execute("SELECT COUNT(*) FROM reading_materials").fetchone()[0]
                if count == 0:
                    for m in MATERIALS:
                        cur = self._conn.execute(
                            "INSERT INTO reading_materials (title, content) VALUES (?, ?)",
                            (m.title, m.content),
                        )
                        self._conn.executemany(
                            "INSERT INTO questions (material_id, category, difficulty, "
                            "question_text, correct_answer, content, distractors) "
                            "VALUES (?, ?, ?, ?, ?, ?, ?)",
                            [(cur.lastrowid, m.category, m.difficulty, *q) for q in m.questions],
                        )
                    seeded = True

                count = self._conn.execute("SELECT COUNT(*) FROM story_episodes").fetchone()[0]
                if count == 0:
                    for ep in EPISODES:
                        cur = self._conn.execute(
                            "INSERT INTO story_episodes (episode_number, title, content, xp_reward) "
                            "VALUES (?, ?, ?, ?)",
                            (ep.number, ep.title, ep.content, ep.xp_reward),
                        )
                        self._conn.executemany(
                            "INSERT INTO story_quizzes (episode_id, question_text, correct_answer, "
                            "option_a, option_b, option_c, option_d) VALUES (?, ?, ?, ?, ?, ?, ?)",
                            [(cur.lastrowid, *q) for q in ep.quizzes],
                        )
                    seeded = True
            return seeded

        seeded = self._run(_seed)
        if seeded:
            logger.info("Seeded content into %s", self.path)
        return seeded

    def random_question(self, category: str) -> dict | None:
        """A random question of *category* with its reading material attached."""
        row = self._run(lambda: self._conn.execute(
            "SELECT q.*, rm.title AS material_title, rm.content AS material_content "
            "FROM questions q LEFT JOIN reading_materials rm ON q.material_id = rm.id "
            "WHERE q.category = ? ORDER BY RANDOM() LIMIT 1",
            (category,),
        ).fetchone())
        if row is None:
            return None
        question = dict(row)
        question["distractors"] = [d for d in question["distractors"].split(",") if d]
        return question

    def story_episode(self, episode_number: int) -> tuple[dict, list[dict]] | None:
        """Episode row and its quiz items, or None for an unknown episode."""
        def _load():
            ep = self._conn.execute(
                "SELECT * FROM story_episodes WHERE episode_number = ?", (episode_number,)
            ).fetchone()
            if ep is None:
                return None
            quizzes = self._conn.execute(
                "SELECT * FROM story_quizzes WHERE episode_id = ? ORDER BY id", (ep["id"],)
            ).fetchall()
            return dict(ep), [dict(q) for q in quizzes]

        return self._run(_load)

    # ── Users ───────────────────────────────────────────────────────

    def create_user(self, username: str, password_hash: str) -> int:
        def _insert() -> int:
            try:
                cur = self._conn.execute(
                    "INSERT INTO users (username, password_hash) VALUES (?, ?)",
                    (username, password_hash),
                )
            except sqlite3.IntegrityError as e:
                self._conn.rollback()
                raise UsernameTakenError(f"Username already exists: {username}") from e
            self._conn.commit()
            return cur.lastrowid  # type: ignore[return-value]

        return self._run(_insert)

    def get_user_by_username(self, username: str) -> UserRecord | None:
        row = self._run(lambda: self._conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone())
        return _user(row)

    def load_user(self, user_id: int) -> UserRecord | None:
        row = self._run(lambda: self._conn.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone())
        return _user(row)

    def update_user_xp(self, user_id: int, new_xp: int, new_level: int) -> None:
        def _update() -> None:
            cur = self._conn.execute(
                "UPDATE users SET xp = ?, level = ? WHERE id = ?",
                (new_xp, new_level, user_id),
            )
            self._conn.commit()
            if cur.rowcount == 0:
                raise UnknownUserError(f"No user with id {user_id}")

        self._run(_update)

    def leaderboard(self, limit: int = 10) -> list[dict]:
        rows = self._run(lambda: self._conn.execute(
            "SELECT username, xp, level FROM users ORDER BY xp DESC, id LIMIT ?", (limit,)
        ).fetchall())
        return [dict(r) for r in rows]

    # ── Board progress ──────────────────────────────────────────────

    def load_progress(self, user_id: int, game_mode: str) -> SavedProgress | None:
        row = self._run(lambda: self._conn.execute(
            "SELECT user_id, game_mode, position, xp_earned, last_played "
            "FROM user_progress WHERE user_id = ? AND game_mode = ?",
            (user_id, game_mode),
        ).fetchone())
        if row is None:
            return None
        return SavedProgress(**dict(row))

    def save_progress(self, user_id: int, game_mode: str, position: int, xp_earned: int) -> None:
        """Upsert the player's board position and session xp for *game_mode*."""
        def _save() -> None:
            self._conn.execute(
                "INSERT INTO user_progress (user_id, game_mode, position, xp_earned) "
                "VALUES (?, ?, ?, ?) "
                "ON CONFLICT(user_id, game_mode) DO UPDATE SET "
                "position = excluded.position, xp_earned = excluded.xp_earned, "
                "last_played = CURRENT_TIMESTAMP",
                (user_id, game_mode, position, xp_earned),
            )
            self._conn.commit()

        self._run(_save)

    # ── Game sessions ───────────────────────────────────────────────

    def create_game_session(self, mode: str, user_ids: list[int]) -> int:
        def _create() -> int:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO game_sessions (mode, number_of_players) VALUES (?, ?)",
                    (mode, len(user_ids)),
                )
                session_id = cur.lastrowid
                try:
                    self._conn.executemany(
                        "INSERT INTO session_players (session_id, user_id, turn_order, position) "
                        "VALUES (?, ?, ?, ?)",
                        [(session_id, uid, idx, START_TILE) for idx, uid in enumerate(user_ids)],
                    )
                except sqlite3.IntegrityError as e:
                    raise UnknownUserError(f"Unknown user in session players: {user_ids}") from e
            return session_id  # type: ignore[return-value]

        return self._run(_create)

    def update_game_session(
        self,
        session_id: int,
        current_turn_index: int,
        status: str = "active",
    ) -> None:
        def _update() -> None:
            self._conn.execute(
                "UPDATE game_sessions SET current_turn_index = ?, status = ? WHERE id = ?",
                (current_turn_index, status, session_id),
            )
            self._conn.commit()

        self._run(_update)

    def update_session_player(
        self, session_id: int, turn_order: int, position: int, score: int,
    ) -> None:
        def _update() -> None:
            self._conn.execute(
                "UPDATE session_players SET position = ?, score = ? "
                "WHERE session_id = ? AND turn_order = ?",
                (position, score, session_id, turn_order),
            )
            self._conn.commit()

        self._run(_update)

    def game_session(self, session_id: int) -> dict | None:
        def _load():
            row = self._conn.execute(
                "SELECT * FROM game_sessions WHERE id = ?", (session_id,)
            ).fetchone()
            if row is None:
                return None
            players = self._conn.execute(
                "SELECT user_id, position, score, turn_order FROM session_players "
                "WHERE session_id = ? ORDER BY turn_order",
                (session_id,),
            ).fetchall()
            session = dict(row)
            session["players"] = [dict(p) for p in players]
            return session

        return self._run(_load)

    # ── Story progress ──────────────────────────────────────────────

    def story_progress(self, user_id: int) -> StoryProgress:
        """The user's story progress, created at episode 1 on first read."""
        def _load() -> StoryProgress:
            if self._conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone() is None:
                raise UnknownUserError(f"No user with id {user_id}")
            self._conn.execute(
                "INSERT OR IGNORE INTO user_story_progress (user_id) VALUES (?)", (user_id,)
            )
            self._conn.commit()
            row = self._conn.execute(
                "SELECT user_id, current_episode, completed_episodes, total_stars "
                "FROM user_story_progress WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            return StoryProgress(
                user_id=row["user_id"],
                current_episode=row["current_episode"],
                completed_episodes=json.loads(row["completed_episodes"] or "[]"),
                total_stars=row["total_stars"],
            )

        return self._run(_load)

    def record_episode_completion(
        self,
        user_id: int,
        episode_number: int,
        stars: int,
        xp_earned: int,
    ) -> UserRecord:
        """Advance story progress past *episode_number* and credit the xp.

        Zero-star episodes still advance. Returns the updated user.
        """
        progress = self.story_progress(user_id)
        completed = list(progress.completed_episodes)
        if episode_number not in completed:
            completed.append(episode_number)

        def _record() -> None:
            with self._conn:
                user = self._conn.execute(
                    "SELECT xp FROM users WHERE id = ?", (user_id,)
                ).fetchone()
                if user is None:
                    raise UnknownUserError(f"No user with id {user_id}")
                self._conn.execute(
                    "UPDATE user_story_progress SET current_episode = ?, "
                    "completed_episodes = ?, total_stars = total_stars + ? WHERE user_id = ?",
                    (episode_number + 1, json.dumps(completed), stars, user_id),
                )
                new_xp = user["xp"] + xp_earned
                self._conn.execute(
                    "UPDATE users SET xp = ?, level = ? WHERE id = ?",
                    (new_xp, level_of(new_xp), user_id),
                )

        self._run(_record)
        return self.load_user(user_id)  # type: ignore[return-value]

    def close(self) -> None:
        self._conn.close()


def _user(row: sqlite3.Row | None) -> UserRecord | None:
    if row is None:
        return None
    return UserRecord(
        id=row["id"],
        username=row["username"],
        password_hash=row["password_hash"],
        xp=row["xp"],
        level=row["level"],
    )


# ── Round log persistence ────────────────────────────────────────────

@dataclass
class SessionRecorder:
    """Round observer that mirrors positions and turn order into a game session."""

    db: AdventureDB
    session_id: int

    def on_action(self, entry: LogEntry) -> None:
        self.db.update_session_player(
            self.session_id,
            turn_order=entry.player,
            position=entry.state_after.position,
            score=entry.state_after.session_xp,
        )
        status = "finished" if entry.is_winning_move else "active"
        self.db.update_game_session(self.session_id, entry.next_player, status)
