"""Experience points and level thresholds."""

from __future__ import annotations

# (minimum xp, level), ascending. Past the last row every level costs TAIL_STEP.
LEVEL_THRESHOLDS: tuple[tuple[int, int], ...] = (
    (0, 1),
    (200, 2),
    (500, 3),
    (900, 4),
)
TAIL_STEP = 500


class InvalidXpError(ValueError):
    """Raised for negative or non-integer xp values."""


def _check_xp(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidXpError(f"{what} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidXpError(f"{what} must not be negative, got {value}")


def level_of(xp: int) -> int:
    """Level reached with *xp* total experience."""
    _check_xp(xp, "xp")
    tail_start, tail_level = LEVEL_THRESHOLDS[-1]
    if xp >= tail_start:
        return tail_level + (xp - tail_start) // TAIL_STEP

    level = 1
    for threshold, lvl in LEVEL_THRESHOLDS:
        if xp >= threshold:
            level = lvl
    return level


def xp_required_for_level(level: int) -> int:
    """Total xp at which *level* starts."""
    if level < 1:
        raise ValueError(f"Levels start at 1, got {level}")
    for threshold, lvl in LEVEL_THRESHOLDS:
        if lvl == level:
            return threshold
    tail_start, tail_level = LEVEL_THRESHOLDS[-1]
    return tail_start + (level - tail_level) * TAIL_STEP


def next_level_xp(level: int) -> int:
    """Total xp needed to leave *level*."""
    return xp_required_for_level(level + 1)


def xp_span_for_level(level: int) -> int:
    """How much xp *level* is wide: 200, 300, 400, then 500 for good."""
    return next_level_xp(level) - xp_required_for_level(level)


def xp_into_level(xp: int) -> int:
    """Xp earned since the current level started (progress-bar numerator)."""
    return xp - xp_required_for_level(level_of(xp))


def add_xp(current: int, amount: int) -> int:
    _check_xp(current, "current xp")
    _check_xp(amount, "xp amount")
    return current + amount


def deduct_xp(current: int, amount: int) -> int:
    """Remove *amount* xp, never going below zero."""
    _check_xp(current, "current xp")
    _check_xp(amount, "xp amount")
    return max(0, current - amount)
