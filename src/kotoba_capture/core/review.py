"""Review ladder - the leveled spaced-review state machine as data."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping, Sequence, Tuple


class ReviewOutcome(str, Enum):
    """Grading signals accepted by the scheduler.

    A ladder only accepts the outcomes present in its transition table.
    """

    CORRECT = "correct"
    INCORRECT = "incorrect"
    FORGOT = "forgot"
    HARD = "hard"
    EASY = "easy"


class Transition(str, Enum):
    PROMOTE = "promote"
    DEMOTE = "demote"
    RESET = "reset"


DEFAULT_INTERVALS: Tuple[timedelta, ...] = (
    timedelta(0),
    timedelta(minutes=10),
    timedelta(days=1),
    timedelta(days=3),
    timedelta(days=7),
    timedelta(days=30),
)


@dataclass(frozen=True)
class ReviewLadder:
    """Interval ladder plus the outcome -> transition table.

    Level ``i`` waits ``intervals[i]`` before the next review. The top
    level is ``len(intervals) - 1``.
    """

    intervals: Tuple[timedelta, ...]
    transitions: Mapping[ReviewOutcome, Transition]

    def __post_init__(self) -> None:
        if not self.intervals:
            raise ValueError("Review ladder needs at least one interval")
        if any(interval < timedelta(0) for interval in self.intervals):
            raise ValueError("Review intervals must not be negative")
        if not self.transitions:
            raise ValueError("Review ladder needs at least one outcome")

    @property
    def top_level(self) -> int:
        return len(self.intervals) - 1

    @property
    def outcomes(self) -> Tuple[ReviewOutcome, ...]:
        return tuple(self.transitions)

    def clamp(self, level: int) -> int:
        return max(0, min(self.top_level, level))

    def next_level(self, level: int, outcome: ReviewOutcome) -> int:
        """Apply ``outcome`` to ``level``.

        Raises:
            KeyError: If the ladder does not accept ``outcome``.
        """
        transition = self.transitions[outcome]
        level = self.clamp(level)
        if transition is Transition.PROMOTE:
            return min(self.top_level, level + 1)
        if transition is Transition.DEMOTE:
            return max(0, level - 1)
        return 0

    def interval_for(self, level: int) -> timedelta:
        return self.intervals[self.clamp(level)]

    @classmethod
    def from_minutes(
        cls, minutes: Sequence[float], transitions: Mapping[ReviewOutcome, Transition]
    ) -> "ReviewLadder":
        return cls(
            intervals=tuple(timedelta(minutes=m) for m in minutes),
            transitions=dict(transitions),
        )


BINARY_LADDER = ReviewLadder(
    intervals=DEFAULT_INTERVALS,
    transitions={
        ReviewOutcome.CORRECT: Transition.PROMOTE,
        ReviewOutcome.INCORRECT: Transition.DEMOTE,
    },
)

QUALITY_LADDER = ReviewLadder(
    intervals=DEFAULT_INTERVALS,
    transitions={
        ReviewOutcome.FORGOT: Transition.RESET,
        ReviewOutcome.HARD: Transition.DEMOTE,
        ReviewOutcome.EASY: Transition.PROMOTE,
    },
)


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of grading one vocabulary record."""

    vocabulary_id: str
    previous_level: int
    new_level: int
    next_review_at: datetime
