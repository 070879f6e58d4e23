"""Unit tests for the review ladder state machine."""

from datetime import timedelta

import pytest

from kotoba_capture.core import (
    BINARY_LADDER,
    QUALITY_LADDER,
    ReviewLadder,
    ReviewOutcome,
    Transition,
)


class TestBinaryLadder:
    def test_correct_promotes_one_level(self):
        assert BINARY_LADDER.next_level(0, ReviewOutcome.CORRECT) == 1
        assert BINARY_LADDER.next_level(3, ReviewOutcome.CORRECT) == 4

    def test_correct_caps_at_top_level(self):
        top = BINARY_LADDER.top_level
        assert top == 5
        assert BINARY_LADDER.next_level(top, ReviewOutcome.CORRECT) == top

    def test_incorrect_decays_one_level(self):
        assert BINARY_LADDER.next_level(3, ReviewOutcome.INCORRECT) == 2

    def test_incorrect_floors_at_zero(self):
        assert BINARY_LADDER.next_level(0, ReviewOutcome.INCORRECT) == 0

    def test_rejects_quality_outcomes(self):
        with pytest.raises(KeyError):
            BINARY_LADDER.next_level(1, ReviewOutcome.EASY)

    def test_intervals_follow_example_ladder(self):
        assert BINARY_LADDER.interval_for(0) == timedelta(0)
        assert BINARY_LADDER.interval_for(1) == timedelta(minutes=10)
        assert BINARY_LADDER.interval_for(2) == timedelta(days=1)
        assert BINARY_LADDER.interval_for(5) == timedelta(days=30)


class TestQualityLadder:
    def test_forgot_resets_to_zero(self):
        assert QUALITY_LADDER.next_level(4, ReviewOutcome.FORGOT) == 0

    def test_hard_decays(self):
        assert QUALITY_LADDER.next_level(4, ReviewOutcome.HARD) == 3
        assert QUALITY_LADDER.next_level(0, ReviewOutcome.HARD) == 0

    def test_easy_promotes(self):
        assert QUALITY_LADDER.next_level(4, ReviewOutcome.EASY) == 5
        assert QUALITY_LADDER.next_level(5, ReviewOutcome.EASY) == 5


def test_level_stays_in_bounds_for_any_sequence():
    outcomes = [ReviewOutcome.CORRECT] * 9 + [ReviewOutcome.INCORRECT] * 12 + [ReviewOutcome.CORRECT] * 3
    level = 0
    for outcome in outcomes:
        level = BINARY_LADDER.next_level(level, outcome)
        assert 0 <= level <= BINARY_LADDER.top_level
    assert level == 3


def test_out_of_range_level_is_clamped_before_transition():
    assert BINARY_LADDER.next_level(42, ReviewOutcome.INCORRECT) == 4
    assert BINARY_LADDER.interval_for(-3) == timedelta(0)


def test_custom_ladder_from_minutes():
    ladder = ReviewLadder.from_minutes(
        [0, 1, 5],
        {ReviewOutcome.CORRECT: Transition.PROMOTE, ReviewOutcome.INCORRECT: Transition.RESET},
    )
    assert ladder.top_level == 2
    assert ladder.interval_for(2) == timedelta(minutes=5)
    assert ladder.next_level(2, ReviewOutcome.INCORRECT) == 0


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        ReviewLadder(
            intervals=(timedelta(0), timedelta(minutes=-1)),
            transitions={ReviewOutcome.CORRECT: Transition.PROMOTE},
        )


def test_empty_ladder_rejected():
    with pytest.raises(ValueError):
        ReviewLadder(intervals=(), transitions={ReviewOutcome.CORRECT: Transition.PROMOTE})
