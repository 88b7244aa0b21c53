"""Progression engine: applies one score event to a player's state.

Every call is a pure ``PlayerState -> Transition`` transform. Sequencing,
timers, dice and persistence belong to the caller (see ``game.RoundRunner``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace

from adventure_game.board import (
    CLASSIC_BOARD,
    PLAIN_BOARD,
    BoardTransformTable,
    MoveResult,
    PlayerState,
    apply_move,
)
from adventure_game.levels import add_xp, deduct_xp, level_of
from adventure_game.scoring import (
    JUNGLE_STEP_XP,
    MC_STEPS,
    WIN_XP_BONUS,
    WRONG_ANSWER_PENALTY,
    grade_episode,
    score_timed_word,
)


class GameMode(str, enum.Enum):
    """Board mini-games. The value doubles as the question category."""

    JUNGLE = "Jumanji"
    SCRABBLE = "Scrabble"
    SNAKES = "Snakes"

    @property
    def rolls_dice(self) -> bool:
        return self is GameMode.SNAKES

    @property
    def default_table(self) -> BoardTransformTable:
        return CLASSIC_BOARD if self is GameMode.SNAKES else PLAIN_BOARD


# ── Score events (input) ─────────────────────────────────────────────

@dataclass(frozen=True)
class Move:
    steps: int


@dataclass(frozen=True)
class DiceRoll:
    steps: int


@dataclass(frozen=True)
class CorrectAnswer:
    time_remaining: int | None = None  # set for timed word answers


@dataclass(frozen=True)
class WrongAnswer:
    pass


@dataclass(frozen=True)
class EpisodeResult:
    correct_count: int
    base_reward: int


@dataclass(frozen=True)
class JungleBonusXp:
    amount: int


ScoreEvent = Move | DiceRoll | CorrectAnswer | WrongAnswer | EpisodeResult | JungleBonusXp


# ── Derived events (output) ──────────────────────────────────────────

@dataclass(frozen=True)
class Moved:
    start: int
    landed: int
    final: int
    jump: str | None = None


@dataclass(frozen=True)
class XpChanged:
    delta: int
    xp: int


@dataclass(frozen=True)
class LevelUp:
    old_level: int
    new_level: int


@dataclass(frozen=True)
class StarsAwarded:
    stars: int
    xp_earned: int


@dataclass(frozen=True)
class Win:
    position: int


@dataclass
class Transition:
    """Result of applying one event."""

    before: PlayerState
    state: PlayerState
    events: list = field(default_factory=list)
    steps: int = 0
    awaiting_roll: bool = False

    @property
    def won(self) -> bool:
        return any(isinstance(e, Win) for e in self.events)

    @property
    def leveled_up(self) -> bool:
        return any(isinstance(e, LevelUp) for e in self.events)

    @property
    def xp_delta(self) -> int:
        return self.state.xp - self.before.xp


DICE_FACES = 6


class ProgressionEngine:
    """Apply score events for one game mode."""

    def __init__(self, mode: GameMode = GameMode.SNAKES, table: BoardTransformTable | None = None):
        self.mode = GameMode(mode)
        self.table = table if table is not None else self.mode.default_table

    def apply(self, state: PlayerState, event: ScoreEvent) -> Transition:
        if isinstance(event, Move):
            return self._move(state, event.steps)

        if isinstance(event, DiceRoll):
            if isinstance(event.steps, bool) or not isinstance(event.steps, int) \
                    or not 1 <= event.steps <= DICE_FACES:
                raise ValueError(f"Dice roll must be 1..{DICE_FACES}, got {event.steps!r}")
            return self._move(state, event.steps)

        if isinstance(event, CorrectAnswer):
            return self._correct_answer(state, event)

        if isinstance(event, WrongAnswer):
            after = replace(
                state,
                xp=deduct_xp(state.xp, WRONG_ANSWER_PENALTY),
                session_xp=deduct_xp(state.session_xp, WRONG_ANSWER_PENALTY),
            )
            return self._finish(Transition(before=state, state=after))

        if isinstance(event, EpisodeResult):
            grade = grade_episode(event.correct_count, event.base_reward)
            transition = Transition(before=state, state=_gain(state, grade.xp_earned))
            transition.events.append(StarsAwarded(grade.stars, grade.xp_earned))
            return self._finish(transition)

        if isinstance(event, JungleBonusXp):
            return self._finish(Transition(before=state, state=_gain(state, event.amount)))

        raise TypeError(f"Unknown score event: {event!r}")

    # ── helpers ──

    def _correct_answer(self, state: PlayerState, event: CorrectAnswer) -> Transition:
        if event.time_remaining == 0:
            # The clock ran out before the word was submitted
            return self.apply(state, WrongAnswer())
        if event.time_remaining is not None:
            score = score_timed_word(event.time_remaining)
            steps, xp = score.steps, score.xp
        else:
            steps = MC_STEPS
            xp = JUNGLE_STEP_XP.get(steps, 0) if self.mode is GameMode.JUNGLE else 0

        gained = _gain(state, xp)
        if self.mode.rolls_dice:
            transition = Transition(before=state, state=gained, awaiting_roll=True)
            return self._finish(transition)

        transition = self._move(gained, steps)
        transition.before = state
        return self._finish(transition)

    def _move(self, state: PlayerState, steps: int) -> Transition:
        result: MoveResult = apply_move(state, steps, self.table)
        after = result.state
        transition = Transition(before=state, state=after, steps=steps)
        transition.events.append(
            Moved(start=result.start, landed=result.landed, final=result.final, jump=result.jump)
        )
        if result.won:
            transition.state = _gain(after, WIN_XP_BONUS)
            transition.events.append(Win(position=after.position))
        return self._finish(transition)

    def _finish(self, transition: Transition) -> Transition:
        """Add xp and level-up events, replacing stale ones from nested calls."""
        transition.events = [
            e for e in transition.events if not isinstance(e, (XpChanged, LevelUp))
        ]
        delta = transition.xp_delta
        if delta:
            transition.events.append(XpChanged(delta=delta, xp=transition.state.xp))
        old_level = level_of(transition.before.xp)
        new_level = transition.state.level
        if new_level > old_level:
            transition.events.append(LevelUp(old_level, new_level))
        return transition


def _gain(state: PlayerState, amount: int) -> PlayerState:
    return replace(
        state,
        xp=add_xp(state.xp, amount),
        session_xp=add_xp(state.session_xp, amount),
    )


def next_turn(player_count: int, current_index: int, skip: bool = False) -> int:
    """Index of the player who acts next; a skip passes over one player."""
    if player_count < 1:
        raise ValueError(f"Need at least one player, got {player_count}")
    if not 0 <= current_index < player_count:
        raise ValueError(f"Player index {current_index} out of range for {player_count} players")
    return (current_index + (2 if skip else 1)) % player_count
