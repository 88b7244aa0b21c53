"""Board layout and movement rules for the snakes & ladders track."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from adventure_game.levels import InvalidXpError, level_of

START_TILE = 1
GOAL_TILE = 100

# fmt: off
SNAKES: Mapping[int, int] = MappingProxyType({
    16:  6,  47: 26,  49: 11,  56: 53,  62: 19,
    64: 60,  87: 24,  93: 73,  95: 75,  98: 78,
})

LADDERS: Mapping[int, int] = MappingProxyType({
     1: 38,   4: 14,   9: 31,  21: 42,  28: 84,
    36: 44,  51: 67,  71: 91,  80: 100,
})
# fmt: on


class InvalidMoveError(ValueError):
    """Raised when a move request breaks the movement contract."""


@dataclass(frozen=True)
class BoardTransformTable:
    """Fixed snake and ladder mappings.

    Sources are disjoint and never double as targets, snakes always go down,
    ladders always go up, and every tile lies in 1..100.
    """

    snakes: Mapping[int, int] = field(default_factory=dict)
    ladders: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for src, dest in self.snakes.items():
            _check_tile(src)
            _check_tile(dest)
            if dest >= src:
                raise ValueError(f"Snake {src} -> {dest} does not go down")
        for src, dest in self.ladders.items():
            _check_tile(src)
            _check_tile(dest)
            if dest <= src:
                raise ValueError(f"Ladder {src} -> {dest} does not go up")
        shared = set(self.snakes) & set(self.ladders)
        if shared:
            raise ValueError(f"Tiles are both snake and ladder sources: {sorted(shared)}")
        # A target that is itself a source would chain jumps and can loop
        sources = set(self.snakes) | set(self.ladders)
        chained = sources & (set(self.snakes.values()) | set(self.ladders.values()))
        if chained:
            raise ValueError(f"Jump targets are also jump sources: {sorted(chained)}")

    def is_snake(self, tile: int) -> bool:
        return tile in self.snakes

    def is_ladder(self, tile: int) -> bool:
        return tile in self.ladders

    def destination(self, tile: int) -> int | None:
        """Where landing on *tile* sends the pawn, or None for a plain tile."""
        if tile in self.snakes:
            return self.snakes[tile]
        return self.ladders.get(tile)


def _check_tile(tile: int) -> None:
    if not START_TILE <= tile <= GOAL_TILE:
        raise ValueError(f"Tile {tile} is off the board")


CLASSIC_BOARD = BoardTransformTable(snakes=SNAKES, ladders=LADDERS)
PLAIN_BOARD = BoardTransformTable()


@dataclass(frozen=True)
class PlayerState:
    """One player's progress in a session. ``level`` always follows ``xp``."""

    position: int = START_TILE
    xp: int = 0
    session_xp: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.position, bool) or not isinstance(self.position, int) \
                or not START_TILE <= self.position <= GOAL_TILE:
            raise ValueError(f"position must be within {START_TILE}..{GOAL_TILE}, got {self.position!r}")
        for name in ("xp", "session_xp"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidXpError(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def level(self) -> int:
        return level_of(self.xp)

    @property
    def has_won(self) -> bool:
        return self.position >= GOAL_TILE


@dataclass(frozen=True)
class MoveResult:
    """What happened after a move."""

    start: int
    landed: int
    final: int
    state: PlayerState
    jump: str | None = None  # "snake" | "ladder"
    won: bool = False


def apply_move(
    state: PlayerState,
    steps: int,
    table: BoardTransformTable = CLASSIC_BOARD,
) -> MoveResult:
    """Move *state* forward by *steps* and resolve at most one snake or ladder.

    Overshooting the goal truncates to it. Does NOT mutate *state*.
    """
    if isinstance(steps, bool) or not isinstance(steps, int) or steps < 1:
        raise InvalidMoveError(f"Steps must be a positive integer, got {steps!r}")

    start = state.position
    landed = min(start + steps, GOAL_TILE)

    # The goal sits past every source in the table
    if landed >= GOAL_TILE:
        return MoveResult(
            start=start, landed=landed, final=landed,
            state=replace(state, position=landed), won=True,
        )

    jump = None
    final = landed
    dest = table.destination(landed)
    if dest is not None:
        jump = "snake" if table.is_snake(landed) else "ladder"
        final = dest

    return MoveResult(
        start=start,
        landed=landed,
        final=final,
        state=replace(state, position=final),
        jump=jump,
        won=final >= GOAL_TILE,
    )
