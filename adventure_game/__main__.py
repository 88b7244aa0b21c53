"""CLI entry point: python -m adventure_game {serve,seed,leaderboard,chart,simulate}."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from adventure_game.board import PlayerState
from adventure_game.chart import make_leaderboard_chart
from adventure_game.config import Settings
from adventure_game.engine import GameMode
from adventure_game.game import ListObserver, RoundRunner, TeeObserver
from adventure_game.levels import level_of
from adventure_game.persistence import AdventureDB, SessionRecorder
from adventure_game.players import BotPlayer


def _db_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.db) if args.db else settings.db_path


# ── serve ────────────────────────────────────────────────────────────

def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    """Run the REST API with Flask's built-in server."""
    from adventure_game.server import create_app

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(_db_path(args, settings))
    host = args.host or settings.host
    port = args.port or settings.port
    print(f"Server running on http://{host}:{port}")
    app.run(host=host, port=port, debug=args.debug)


# ── seed ─────────────────────────────────────────────────────────────

def cmd_seed(args: argparse.Namespace, settings: Settings) -> None:
    path = _db_path(args, settings)
    db = AdventureDB(path)
    if db.seed_content():
        print(f"Seeded questions and story episodes into {path}")
    else:
        print(f"{path} already has content. Nothing to do.")
    db.close()


# ── leaderboard ──────────────────────────────────────────────────────

def _load_leaderboard(args: argparse.Namespace, settings: Settings) -> list[dict]:
    path = _db_path(args, settings)
    if not path.exists():
        print(f"No database found at {path}. Start the server or run seed first.", file=sys.stderr)
        sys.exit(1)

    db = AdventureDB(path)
    entries = db.leaderboard(limit=args.limit)
    db.close()

    if not entries:
        print("No players yet.", file=sys.stderr)
        sys.exit(1)
    return entries


def cmd_leaderboard(args: argparse.Namespace, settings: Settings) -> None:
    entries = _load_leaderboard(args, settings)
    print("\nLeaderboard")
    print("=" * 40)
    for rank, row in enumerate(entries, start=1):
        print(f"  {rank:2d}. {row['username']:24s} {row['xp']:6d} XP  Lvl {row['level']}")


def cmd_chart(args: argparse.Namespace, settings: Settings) -> None:
    entries = _load_leaderboard(args, settings)
    out = args.output or "leaderboard.png"
    make_leaderboard_chart(entries, output_path=out)
    print(f"Chart saved to {out}")


# ── simulate ─────────────────────────────────────────────────────────

def cmd_simulate(args: argparse.Namespace, settings: Settings) -> None:
    """Play one round with answer bots, optionally on behalf of registered users."""
    path = _db_path(args, settings)
    db = AdventureDB(path)
    db.seed_content()

    mode = GameMode(args.mode)
    rng = random.Random(args.seed)

    users = []
    for username in args.users or []:
        user = db.get_user_by_username(username)
        if user is None:
            print(f"Unknown user: {username}", file=sys.stderr)
            db.close()
            sys.exit(1)
        users.append(user)

    names = [u.username for u in users] or [f"bot-{i + 1}" for i in range(args.players)]
    players = [
        BotPlayer(name, accuracy=args.accuracy, timed=mode is GameMode.SCRABBLE, rng=rng)
        for name in names
    ]
    states = [PlayerState(xp=u.xp) for u in users] if users else None

    log = ListObserver()
    observer = TeeObserver([log])
    if users:
        session_id = db.create_game_session(mode.value, [u.id for u in users])
        observer.observers.append(SessionRecorder(db, session_id))

    runner = RoundRunner(
        players=players,
        mode=mode,
        questions=db,
        states=states,
        rng=rng,
        max_turns=args.max_turns,
        observer=observer,
    )
    result = runner.play()

    for entry in log.entries:
        name = names[entry.player]
        mark = "correct" if entry.correct else "wrong"
        dice = f" rolled {entry.dice}," if entry.dice is not None else ""
        print(
            f"[{entry.turn_number:3d}] {name:12s} {mark:7s}{dice} "
            f"{entry.state_before.position:3d} -> {entry.state_after.position:3d}  "
            f"xp {entry.state_after.xp}"
        )

    if users:
        for user, state in zip(users, result.states):
            db.update_user_xp(user.id, state.xp, level_of(state.xp))
            # A finished round starts the next session from the first tile
            position = 1 if result.reason == "win" else state.position
            session_xp = 0 if result.reason == "win" else state.session_xp
            db.save_progress(user.id, mode.value, position, session_xp)
    db.close()

    winner = names[result.winner] if result.winner is not None else None
    print(f"{result.reason} after {result.turns} turns → {winner or 'no winner'}")


# ── main ─────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        prog="adventure_game",
        description="Reading Adventure game server and tools",
    )
    parser.add_argument("--db", help=f"SQLite database path (default {settings.db_path})")
    sub = parser.add_subparsers(dest="command")

    p_serve = sub.add_parser("serve", help="Run the REST API server")
    p_serve.add_argument("--host", help=f"Bind address (default {settings.host})")
    p_serve.add_argument("--port", type=int, help=f"Port (default {settings.port})")
    p_serve.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    sub.add_parser("seed", help="Load questions and story episodes")

    p_lb = sub.add_parser("leaderboard", help="Print the top players")
    p_lb.add_argument("--limit", type=int, default=10)

    p_chart = sub.add_parser("chart", help="Generate leaderboard chart")
    p_chart.add_argument("--limit", type=int, default=10)
    p_chart.add_argument("--output", "-o", help="Output PNG path")

    p_sim = sub.add_parser("simulate", help="Play one round with answer bots")
    p_sim.add_argument("--mode", choices=[m.value for m in GameMode], default=GameMode.SNAKES.value)
    p_sim.add_argument("--players", type=int, default=2, help="Number of anonymous bots")
    p_sim.add_argument("--users", nargs="*", help="Play on behalf of these registered users")
    p_sim.add_argument("--accuracy", type=float, default=0.7, help="Chance a bot answers correctly")
    p_sim.add_argument("--max-turns", type=int, default=200)
    p_sim.add_argument("--seed", type=int, help="Random seed for a reproducible round")

    args = parser.parse_args(argv)
    if args.command == "serve":
        cmd_serve(args, settings)
    elif args.command == "seed":
        cmd_seed(args, settings)
    elif args.command == "leaderboard":
        cmd_leaderboard(args, settings)
    elif args.command == "chart":
        cmd_chart(args, settings)
    elif args.command == "simulate":
        cmd_simulate(args, settings)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
