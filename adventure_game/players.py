"""Non-human players for simulated rounds."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from adventure_game.game import Answer
from adventure_game.scoring import WORD_TIME_LIMIT


@dataclass
class BotPlayer:
    """Answers correctly with probability *accuracy*, otherwise picks a distractor.

    Word questions (those with letter tiles) also get a random finishing time.
    """

    display_name: str
    accuracy: float = 0.7
    timed: bool = False
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @property
    def name(self) -> str:
        return self.display_name

    def answer(self, question: dict) -> Answer:
        correct = self.rng.random() < self.accuracy
        if correct:
            text = question["correct_answer"]
        else:
            wrong = [d for d in question.get("distractors", []) if d != question["correct_answer"]]
            text = self.rng.choice(wrong) if wrong else ""

        if not self.timed:
            return Answer(text)
        # A wrong bot sometimes lets the clock run out instead
        if not correct and self.rng.random() < 0.3:
            return Answer(text, time_remaining=0)
        return Answer(text, time_remaining=self.rng.randint(1, WORD_TIME_LIMIT))


@dataclass
class ScriptedPlayer:
    """Deterministic player that replays a fixed list of answers."""

    display_name: str
    script: list[Answer] = field(default_factory=list)
    _idx: int = field(default=0, repr=False)

    @property
    def name(self) -> str:
        return self.display_name

    def answer(self, question: dict) -> Answer:
        action = self.script[self._idx]
        self._idx += 1
        return action
