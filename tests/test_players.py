"""Tests for the answer bots."""

import random

from adventure_game.game import Answer, Player
from adventure_game.players import BotPlayer, ScriptedPlayer

QUESTION = {"correct_answer": "map", "distractors": ["food", "hat", "compass"]}


def test_players_satisfy_protocol():
    assert isinstance(BotPlayer("bot"), Player)
    assert isinstance(ScriptedPlayer("script"), Player)


def test_perfect_bot_always_right():
    bot = BotPlayer("bot", accuracy=1.0, rng=random.Random(1))
    for _ in range(20):
        assert bot.answer(QUESTION).text == "map"


def test_hopeless_bot_picks_distractor():
    bot = BotPlayer("bot", accuracy=0.0, rng=random.Random(1))
    for _ in range(20):
        assert bot.answer(QUESTION).text in QUESTION["distractors"]


def test_untimed_bot_sends_no_clock():
    bot = BotPlayer("bot", accuracy=1.0, rng=random.Random(1))
    assert bot.answer(QUESTION).time_remaining is None


def test_timed_bot_answers_within_limit():
    bot = BotPlayer("bot", accuracy=1.0, timed=True, rng=random.Random(2))
    for _ in range(20):
        assert 1 <= bot.answer(QUESTION).time_remaining <= 30


def test_scripted_player_replays_in_order():
    p = ScriptedPlayer("s", [Answer("a"), Answer("b", time_remaining=3)])
    assert p.name == "s"
    assert p.answer(QUESTION) == Answer("a")
    assert p.answer(QUESTION) == Answer("b", time_remaining=3)
