"""Round runner: sequences questions, answers, moves and turns for one board game."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from adventure_game.board import PlayerState
from adventure_game.engine import (
    DICE_FACES,
    CorrectAnswer,
    DiceRoll,
    GameMode,
    JungleBonusXp,
    Move,
    ProgressionEngine,
    ScoreEvent,
    Transition,
    WrongAnswer,
    next_turn,
)
from adventure_game.scoring import JungleEvent, is_correct_choice, roll_jungle_event, score_word


# ── Collaborators ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Answer:
    text: str
    time_remaining: int | None = None  # word mode only; 0 means the clock ran out


@runtime_checkable
class Player(Protocol):
    """Anything with a display name that can answer a question dict."""

    @property
    def name(self) -> str: ...

    def answer(self, question: dict) -> Answer: ...


class QuestionSource(Protocol):
    def random_question(self, category: str) -> dict | None: ...


class RoundObserver(Protocol):
    """Receives one entry per completed turn."""

    def on_action(self, entry: LogEntry) -> None: ...


@dataclass
class ListObserver:
    """Keeps every turn entry in memory."""

    entries: list[LogEntry] = field(default_factory=list)

    def on_action(self, entry: LogEntry) -> None:
        self.entries.append(entry)


@dataclass
class TeeObserver:
    """Forwards every entry to several observers in order."""

    observers: list = field(default_factory=list)

    def on_action(self, entry: LogEntry) -> None:
        for observer in self.observers:
            observer.on_action(entry)


# ── Structured types ────────────────────────────────────────────────

class RoundPhase(enum.Enum):
    AWAITING_QUESTION = "awaiting_question"
    ANSWERING = "answering"
    RESOLVED = "resolved"
    MOVING = "moving"
    NEXT_TURN_OR_WIN = "next_turn_or_win"
    WIN = "win"
    ABANDONED = "abandoned"


TERMINAL_PHASES = (RoundPhase.WIN, RoundPhase.ABANDONED)


class PhaseError(RuntimeError):
    """Raised when a round step is requested out of order."""


class NoQuestionError(LookupError):
    """Raised when the question source has nothing for the current mode."""


@dataclass
class LogEntry:
    """Record of one player's turn."""

    turn_number: int
    player: int
    question_id: int | None
    answer: str
    correct: bool
    event: ScoreEvent
    state_before: PlayerState
    state_after: PlayerState
    next_player: int
    dice: int | None = None
    jungle_event: JungleEvent | None = None
    events: list = field(default_factory=list)
    is_winning_move: bool = False


@dataclass
class RoundResult:
    winner: int | None  # player index, None when nobody won
    reason: str  # "win" | "max_turns" | "abandoned"
    turns: int = 0
    states: list[PlayerState] = field(default_factory=list)


# ── Runner ───────────────────────────────────────────────────────────

class RoundRunner:
    """Play one round of a board mode among one or more players.

    Each turn walks AWAITING_QUESTION -> ANSWERING -> RESOLVED -> MOVING ->
    NEXT_TURN_OR_WIN. The steps can be driven one by one or via play_turn().
    """

    def __init__(
        self,
        players: list[Player],
        mode: GameMode,
        questions: QuestionSource,
        states: list[PlayerState] | None = None,
        engine: ProgressionEngine | None = None,
        rng: random.Random | None = None,
        max_turns: int = 200,
        observer: RoundObserver | None = None,
    ):
        if not players:
            raise ValueError("A round needs at least one player")
        self.players = players
        self.mode = GameMode(mode)
        self.questions = questions
        self.states = list(states) if states is not None else [PlayerState() for _ in players]
        if len(self.states) != len(players):
            raise ValueError("Need exactly one state per player")
        self.engine = engine or ProgressionEngine(self.mode)
        self.rng = rng or random.Random()
        self.max_turns = max_turns
        self.observer = observer or ListObserver()

        self.phase = RoundPhase.AWAITING_QUESTION
        self.current_player = 0
        self.turn_number = 0
        self.result: RoundResult | None = None

        self._question: dict | None = None
        self._answer: Answer | None = None
        self._event: ScoreEvent | None = None
        self._turn: LogEntry | None = None
        self._skip_next = False

    # ── phase steps ──

    def _expect(self, phase: RoundPhase) -> None:
        if self.phase is not phase:
            raise PhaseError(f"Expected phase {phase.value}, round is in {self.phase.value}")

    def next_question(self) -> dict:
        self._expect(RoundPhase.AWAITING_QUESTION)
        question = self.questions.random_question(self.mode.value)
        if question is None:
            raise NoQuestionError(f"No questions for mode {self.mode.value}")
        self._question = question
        self.turn_number += 1
        self.phase = RoundPhase.ANSWERING
        return question

    def submit(self, answer: Answer) -> bool:
        """Resolve *answer* against the current question. Returns correctness."""
        self._expect(RoundPhase.ANSWERING)
        assert self._question is not None
        target = self._question["correct_answer"]

        if self.mode is GameMode.SCRABBLE:
            time_remaining = answer.time_remaining if answer.time_remaining is not None else 0
            correct = score_word(answer.text, target, time_remaining).correct
            event: ScoreEvent = CorrectAnswer(time_remaining) if correct else WrongAnswer()
        else:
            correct = is_correct_choice(answer.text, target)
            event = CorrectAnswer() if correct else WrongAnswer()

        self._answer = answer
        self._event = event
        self.phase = RoundPhase.RESOLVED
        return correct

    def move(self) -> list[Transition]:
        """Apply the resolved answer, rolling dice or firing a jungle event as the mode requires."""
        self._expect(RoundPhase.RESOLVED)
        assert self._event is not None and self._answer is not None
        self.phase = RoundPhase.MOVING

        idx = self.current_player
        before = self.states[idx]
        transitions = [self.engine.apply(before, self._event)]
        dice = None
        jungle = None

        if transitions[-1].awaiting_roll:
            dice = self.rng.randint(1, DICE_FACES)
            transitions.append(self.engine.apply(transitions[-1].state, DiceRoll(dice)))

        moved = isinstance(self._event, CorrectAnswer)
        if self.mode is GameMode.JUNGLE and moved and not transitions[-1].won:
            jungle = roll_jungle_event(self.rng)
            if jungle is not None:
                if jungle.kind == "bonus":
                    transitions.append(self.engine.apply(transitions[-1].state, Move(jungle.steps)))
                elif jungle.kind == "xp":
                    transitions.append(
                        self.engine.apply(transitions[-1].state, JungleBonusXp(jungle.xp_bonus))
                    )
                elif jungle.kind == "skip":
                    self._skip_next = True

        after = transitions[-1].state
        won = any(t.won for t in transitions)

        self._turn = LogEntry(
            turn_number=self.turn_number,
            player=idx,
            question_id=self._question.get("id") if self._question else None,
            answer=self._answer.text,
            correct=moved,
            event=self._event,
            state_before=before,
            state_after=after,
            next_player=idx,
            dice=dice,
            jungle_event=jungle,
            events=[e for t in transitions for e in t.events],
            is_winning_move=won,
        )
        self.phase = RoundPhase.NEXT_TURN_OR_WIN
        return transitions

    def advance(self) -> RoundResult | None:
        """End the turn: finish the round on a win, else hand over to the next player."""
        self._expect(RoundPhase.NEXT_TURN_OR_WIN)
        assert self._turn is not None
        entry = self._turn
        self.states[entry.player] = entry.state_after

        if entry.is_winning_move:
            self.phase = RoundPhase.WIN
            self.observer.on_action(entry)
            self.result = RoundResult(
                winner=self.current_player, reason="win",
                turns=self.turn_number, states=list(self.states),
            )
            return self.result

        self.current_player = next_turn(len(self.players), self.current_player, skip=self._skip_next)
        entry.next_player = self.current_player
        self.observer.on_action(entry)

        self._skip_next = False
        self._question = self._answer = self._event = self._turn = None
        self.phase = RoundPhase.AWAITING_QUESTION
        return None

    def abandon(self) -> RoundResult:
        """Stop the round. Turns already handed over by advance() stay; a pending one is dropped."""
        if self.phase in TERMINAL_PHASES:
            raise PhaseError(f"Round already ended ({self.phase.value})")
        mid_turn = self.phase is not RoundPhase.AWAITING_QUESTION
        self.phase = RoundPhase.ABANDONED
        self.result = RoundResult(
            winner=None, reason="abandoned",
            turns=self.turn_number - 1 if mid_turn else self.turn_number,
            states=list(self.states),
        )
        return self.result

    # ── drivers ──

    def play_turn(self) -> RoundResult | None:
        player = self.players[self.current_player]
        question = self.next_question()
        self.submit(player.answer(question))
        self.move()
        return self.advance()

    def play(self) -> RoundResult:
        while self.turn_number < self.max_turns:
            result = self.play_turn()
            if result is not None:
                return result

        self.phase = RoundPhase.ABANDONED
        self.result = RoundResult(
            winner=None, reason="max_turns",
            turns=self.turn_number, states=list(self.states),
        )
        return self.result
