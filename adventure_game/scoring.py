"""Answer scoring: timed word tiles, multiple choice, story episodes, jungle events."""

from __future__ import annotations

import random
from dataclasses import dataclass

# ── Constants ────────────────────────────────────────────────────────

WORD_TIME_LIMIT = 30
SPEED_BONUS_INTERVAL = 5
XP_PER_SPEED_BONUS = 5

WRONG_ANSWER_PENALTY = 5
MC_STEPS = 3
WIN_XP_BONUS = 50

# Jungle mode pays xp for plain (non-event) moves of these sizes
JUNGLE_STEP_XP: dict[int, int] = {3: 10, 1: 5}

EPISODE_QUESTIONS = 4
# (minimum correct answers, stars), checked top-down
STAR_CUTOFFS: tuple[tuple[int, int], ...] = ((4, 3), (3, 2), (2, 1))

JUNGLE_EVENT_CHANCE = 0.2


# ── Word tiles ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class WordScore:
    correct: bool
    timed_out: bool = False
    speed_bonus: int = 0
    steps: int = 0
    xp: int = 0


def _check_time(time_remaining: int) -> None:
    if not 0 <= time_remaining <= WORD_TIME_LIMIT:
        raise ValueError(
            f"time_remaining must be within 0..{WORD_TIME_LIMIT}, got {time_remaining}"
        )


def speed_bonus(time_remaining: int) -> int:
    """One bonus point per full 5 units already spent on the clock."""
    _check_time(time_remaining)
    return (WORD_TIME_LIMIT - time_remaining) // SPEED_BONUS_INTERVAL


def score_timed_word(time_remaining: int) -> WordScore:
    """Reward for a correct word finished with *time_remaining* on the clock."""
    bonus = speed_bonus(time_remaining)
    return WordScore(
        correct=True,
        speed_bonus=bonus,
        steps=1 + bonus,
        xp=bonus * XP_PER_SPEED_BONUS,
    )


def words_match(assembled: str, target: str) -> bool:
    """Tiles are upper-case letters, so the comparison ignores case."""
    return assembled.strip().upper() == target.strip().upper()


def score_word(assembled: str, target: str, time_remaining: int) -> WordScore:
    """Score a filled set of letter slots against the target word."""
    _check_time(time_remaining)
    if time_remaining == 0:
        return WordScore(correct=False, timed_out=True)
    if not words_match(assembled, target):
        return WordScore(correct=False)
    return score_timed_word(time_remaining)


def letter_pool(
    answer: str,
    distractors: list[str],
    rng: random.Random | None = None,
) -> list[str]:
    """Shuffled tiles: the answer's letters plus every distractor letter."""
    rng = rng or random.Random()
    letters = list(answer + "".join(distractors))
    rng.shuffle(letters)
    return letters


def answer_options(
    correct_answer: str,
    distractors: list[str],
    rng: random.Random | None = None,
) -> list[str]:
    """Multiple-choice buttons in random order."""
    rng = rng or random.Random()
    options = [correct_answer, *distractors]
    rng.shuffle(options)
    return options


def is_correct_choice(answer: str, correct_answer: str) -> bool:
    return answer == correct_answer


# ── Story episodes ───────────────────────────────────────────────────

@dataclass(frozen=True)
class EpisodeGrade:
    correct_count: int
    stars: int
    xp_earned: int


def stars_for(correct_count: int) -> int:
    if not 0 <= correct_count <= EPISODE_QUESTIONS:
        raise ValueError(
            f"correct_count must be within 0..{EPISODE_QUESTIONS}, got {correct_count}"
        )
    for minimum, stars in STAR_CUTOFFS:
        if correct_count >= minimum:
            return stars
    return 0


def grade_episode(correct_count: int, base_reward: int) -> EpisodeGrade:
    """Stars and xp for one episode quiz. Zero stars still completes the episode."""
    if base_reward < 0:
        raise ValueError(f"base_reward must not be negative, got {base_reward}")
    stars = stars_for(correct_count)
    return EpisodeGrade(
        correct_count=correct_count,
        stars=stars,
        xp_earned=base_reward * stars,
    )


# ── Jungle events ────────────────────────────────────────────────────

@dataclass(frozen=True)
class JungleEvent:
    kind: str  # "bonus" | "skip" | "xp"
    text: str
    steps: int = 0
    xp_bonus: int = 0


JUNGLE_EVENTS: tuple[JungleEvent, ...] = (
    JungleEvent("bonus", "Magic Crystal! Move +2!", steps=2),
    JungleEvent("bonus", "Friendly Lion gives you a ride! Move +3!", steps=3),
    JungleEvent("skip", "Monkey business! Skip next turn!"),
    JungleEvent("xp", "Ancient knowledge! +20 XP!", xp_bonus=20),
    JungleEvent("bonus", "Vine swing! Move +1!", steps=1),
)


def roll_jungle_event(rng: random.Random | None = None) -> JungleEvent | None:
    """After a jungle move there is a 1 in 5 chance of a random event."""
    rng = rng or random.Random()
    if rng.random() < JUNGLE_EVENT_CHANCE:
        return rng.choice(JUNGLE_EVENTS)
    return None
