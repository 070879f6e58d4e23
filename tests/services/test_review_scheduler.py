"""Unit tests for ReviewScheduler."""

from datetime import datetime, timedelta, timezone

import pytest

from kotoba_capture.core import QUALITY_LADDER, LessonDraft, ReviewOutcome
from kotoba_capture.exceptions import InputError, NotFoundError
from kotoba_capture.services import ReviewScheduler

NOW = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def scheduler(vocab_repo):
    return ReviewScheduler(vocab_repo, due_page_size=10, distractor_pool_size=3, clock=lambda: NOW)


def add_word(vocab_repo, word, owner="u1", now=NOW):
    item, _ = vocab_repo.create(owner, LessonDraft(word=word), now=now)
    return item


def test_correct_walks_up_the_ladder(scheduler, vocab_repo):
    item = add_word(vocab_repo, "入口")

    first = scheduler.submit_review("u1", item.id, "correct")
    assert (first.previous_level, first.new_level) == (0, 1)
    assert first.next_review_at == NOW + timedelta(minutes=10)

    later = NOW + timedelta(minutes=10)
    second = scheduler.submit_review("u1", item.id, ReviewOutcome.CORRECT, now=later)
    assert second.new_level == 2
    assert second.next_review_at == later + timedelta(days=1)

    third = scheduler.submit_review("u1", item.id, "incorrect", now=later)
    assert third.new_level == 1

    stored = vocab_repo.get("u1", item.id)
    assert stored.proficiency_level == 1
    assert stored.next_review_at == later + timedelta(minutes=10)


def test_levels_stay_within_bounds(scheduler, vocab_repo):
    item = add_word(vocab_repo, "駅")
    assert scheduler.submit_review("u1", item.id, "incorrect").new_level == 0

    for _ in range(10):
        result = scheduler.submit_review("u1", item.id, "correct")
    assert result.new_level == scheduler.ladder.top_level
    assert result.next_review_at == NOW + timedelta(days=30)


def test_next_review_is_never_before_now(scheduler, vocab_repo):
    item = add_word(vocab_repo, "駅")
    for outcome in ("correct", "incorrect", "incorrect", "correct"):
        assert scheduler.submit_review("u1", item.id, outcome).next_review_at >= NOW


def test_quality_ladder_resets_on_forgot(vocab_repo):
    scheduler = ReviewScheduler(vocab_repo, ladder=QUALITY_LADDER, clock=lambda: NOW)
    item = add_word(vocab_repo, "駅")
    scheduler.submit_review("u1", item.id, "easy")
    scheduler.submit_review("u1", item.id, "easy")
    assert scheduler.submit_review("u1", item.id, "hard").new_level == 1
    assert scheduler.submit_review("u1", item.id, "forgot").new_level == 0


@pytest.mark.parametrize("outcome", ["maybe", "easy", ""])
def test_outcomes_outside_the_ladder_are_rejected(scheduler, vocab_repo, outcome):
    item = add_word(vocab_repo, "駅")
    with pytest.raises(InputError):
        scheduler.submit_review("u1", item.id, outcome)
    assert vocab_repo.get("u1", item.id).proficiency_level == 0


def test_foreign_item_cannot_be_reviewed(scheduler, vocab_repo):
    item = add_word(vocab_repo, "駅", owner="u2")
    with pytest.raises(NotFoundError):
        scheduler.submit_review("u1", item.id, "correct")


def test_list_due_returns_only_due_items_oldest_first(scheduler, vocab_repo):
    early = add_word(vocab_repo, "東京", now=NOW - timedelta(hours=2))
    due_now = add_word(vocab_repo, "駅", now=NOW)
    future = add_word(vocab_repo, "入口", now=NOW)
    scheduler.submit_review("u1", future.id, "correct")
    add_word(vocab_repo, "出口", owner="u2", now=NOW - timedelta(days=1))

    due = scheduler.list_due("u1")

    assert [item.id for item in due] == [early.id, due_now.id]
    assert all(item.next_review_at <= NOW for item in due)


def test_list_due_respects_limit(scheduler, vocab_repo):
    for i in range(5):
        add_word(vocab_repo, f"語{i}", now=NOW - timedelta(minutes=i))
    assert len(scheduler.list_due("u1", NOW, limit=2)) == 2


def test_distractors_exclude_the_tested_item(scheduler, vocab_repo):
    words = [add_word(vocab_repo, w, now=NOW + timedelta(seconds=i)) for i, w in enumerate("一二三四五")]

    distractors = scheduler.list_distractors("u1", exclude_id=words[-1].id)

    assert len(distractors) == 3
    assert words[-1].id not in {item.id for item in distractors}
    assert [item.word for item in distractors] == ["四", "三", "二"]


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limits_are_rejected(scheduler, limit):
    with pytest.raises(InputError):
        scheduler.list_due("u1", NOW, limit=limit)
    with pytest.raises(InputError):
        scheduler.list_distractors("u1", limit=limit)
