"""Tests for adventure_game.board."""

import pytest

from adventure_game.board import (
    CLASSIC_BOARD,
    LADDERS,
    PLAIN_BOARD,
    SNAKES,
    BoardTransformTable,
    InvalidMoveError,
    PlayerState,
    apply_move,
)
from adventure_game.levels import InvalidXpError


# ── constants ────────────────────────────────────────────────────────

def test_board_has_9_ladders():
    assert len(LADDERS) == 9
    assert all(dest > src for src, dest in LADDERS.items())


def test_board_has_10_snakes():
    assert len(SNAKES) == 10
    assert all(dest < src for src, dest in SNAKES.items())


def test_sources_are_disjoint():
    assert not set(SNAKES) & set(LADDERS)


def test_targets_are_never_sources():
    sources = set(SNAKES) | set(LADDERS)
    for dest in list(SNAKES.values()) + list(LADDERS.values()):
        assert dest not in sources


def test_all_tiles_in_range():
    for src, dest in list(SNAKES.items()) + list(LADDERS.items()):
        assert 1 <= src <= 100
        assert 1 <= dest <= 100


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        SNAKES[50] = 1  # type: ignore[index]


def test_destination_lookup():
    assert CLASSIC_BOARD.destination(16) == 6
    assert CLASSIC_BOARD.destination(4) == 14
    assert CLASSIC_BOARD.destination(50) is None
    assert CLASSIC_BOARD.is_snake(98)
    assert CLASSIC_BOARD.is_ladder(28)
    assert not CLASSIC_BOARD.is_ladder(16)


def test_table_rejects_snake_going_up():
    with pytest.raises(ValueError):
        BoardTransformTable(snakes={10: 20})


def test_table_rejects_ladder_going_down():
    with pytest.raises(ValueError):
        BoardTransformTable(ladders={20: 10})


def test_table_rejects_shared_source():
    with pytest.raises(ValueError):
        BoardTransformTable(snakes={30: 5}, ladders={30: 50})


def test_table_rejects_off_board_tile():
    with pytest.raises(ValueError):
        BoardTransformTable(ladders={95: 101})


# ── PlayerState ──────────────────────────────────────────────────────

def test_initial_state():
    s = PlayerState()
    assert s.position == 1
    assert s.xp == 0
    assert s.session_xp == 0
    assert s.level == 1


def test_level_follows_xp():
    assert PlayerState(xp=1400).level == 5


@pytest.mark.parametrize("position", [0, 101, -3, 2.5, True])
def test_state_rejects_off_board_position(position):
    with pytest.raises(ValueError):
        PlayerState(position=position)


@pytest.mark.parametrize("field_name", ["xp", "session_xp"])
def test_state_rejects_negative_xp(field_name):
    with pytest.raises(InvalidXpError):
        PlayerState(**{field_name: -1})


def test_initial_placement_on_ladder_base_does_not_climb():
    """Starting on tile 1 is not a landing; the 1 -> 38 ladder stays untouched."""
    s = PlayerState()
    assert s.position == 1
    result = apply_move(s, 2)
    assert result.landed == 3
    assert result.final == 3


# ── apply_move ───────────────────────────────────────────────────────

def test_normal_move():
    result = apply_move(PlayerState(position=10), 3)
    assert result.landed == 13
    assert result.final == 13
    assert result.jump is None
    assert not result.won


def test_landing_on_snake():
    result = apply_move(PlayerState(position=10), 6)  # 16 -> 6
    assert result.landed == 16
    assert result.final == 6
    assert result.jump == "snake"
    assert result.state.position == 6


def test_landing_on_ladder_4():
    result = apply_move(PlayerState(position=1), 3)  # 4 -> 14
    assert result.landed == 4
    assert result.final == 14
    assert result.jump == "ladder"


def test_ladder_4_reached_through_several_moves():
    s = PlayerState()
    s = apply_move(s, 1).state  # 2
    s = apply_move(s, 1).state  # 3
    result = apply_move(s, 1)
    assert result.final == 14


def test_move_does_not_mutate_input():
    s = PlayerState(position=10)
    apply_move(s, 6)
    assert s.position == 10


def test_exact_landing_on_100_wins():
    result = apply_move(PlayerState(position=96), 4)
    assert result.final == 100
    assert result.won


def test_overshoot_truncates_to_100():
    """Overshoot does not bounce: it clamps to the goal and wins."""
    result = apply_move(PlayerState(position=97), 6)
    assert result.landed == 100
    assert result.final == 100
    assert result.won


def test_landing_on_80_ladder_wins():
    result = apply_move(PlayerState(position=77), 3)  # 80 -> 100
    assert result.jump == "ladder"
    assert result.final == 100
    assert result.won


def test_table_rejects_looping_pair():
    with pytest.raises(ValueError):
        BoardTransformTable(snakes={20: 5}, ladders={5: 20})


def test_table_rejects_chained_jump():
    """A ladder onto a snake head would need a second hop."""
    with pytest.raises(ValueError):
        BoardTransformTable(snakes={20: 2}, ladders={5: 20})


def test_single_hop_per_move():
    table = BoardTransformTable(snakes={30: 12}, ladders={5: 25})
    result = apply_move(PlayerState(position=3), 2, table)
    assert result.jump == "ladder"
    assert result.final == 25


def test_plain_board_ignores_snakes():
    result = apply_move(PlayerState(position=10), 6, PLAIN_BOARD)
    assert result.final == 16
    assert result.jump is None


@pytest.mark.parametrize("steps", [0, -1, 2.5, "3", True])
def test_invalid_steps_rejected(steps):
    s = PlayerState(position=10)
    with pytest.raises(InvalidMoveError):
        apply_move(s, steps)
    assert s.position == 10


def test_never_past_100():
    for start in range(1, 100):
        for steps in range(1, 13):
            assert apply_move(PlayerState(position=start), steps).final <= 100
