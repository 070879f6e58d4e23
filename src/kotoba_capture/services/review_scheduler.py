"""Review Scheduler - leveled spaced review over vocabulary records."""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from kotoba_capture.core import (
    BINARY_LADDER,
    ReviewLadder,
    ReviewOutcome,
    ReviewResult,
    VocabularyItem,
    ensure_utc,
    utc_now,
)
from kotoba_capture.exceptions import InputError
from kotoba_capture.io import VocabularyRepository
from kotoba_capture.services.text_processing import require_owner

logger = logging.getLogger(__name__)


class ReviewScheduler:
    """Grades reviews and selects due items and distractors.

    The ladder decides both the level transition for an outcome and the
    wait before the next review, so switching between the binary and the
    three-way grading model is a configuration change.
    """

    def __init__(
        self,
        vocabulary: VocabularyRepository,
        ladder: ReviewLadder = BINARY_LADDER,
        due_page_size: int = 20,
        distractor_pool_size: int = 50,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._vocabulary = vocabulary
        self.ladder = ladder
        self._due_page_size = due_page_size
        self._distractor_pool_size = distractor_pool_size
        self._clock = clock

    def submit_review(
        self,
        owner_id: str,
        vocabulary_id: str,
        outcome: Union[ReviewOutcome, str],
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        """
        Apply a grading signal and reschedule the record.

        Raises:
            InputError: If the outcome is not accepted by the active ladder.
            NotFoundError: If the owner has no such record.
        """
        owner_id = require_owner(owner_id)
        outcome = self._parse_outcome(outcome)
        now = ensure_utc(now) if now else self._clock()

        item = self._vocabulary.get(owner_id, vocabulary_id)
        new_level = self.ladder.next_level(item.proficiency_level, outcome)
        next_review_at = now + self.ladder.interval_for(new_level)
        self._vocabulary.update_schedule(owner_id, vocabulary_id, new_level, next_review_at)

        logger.debug(
            "Review %s for %r: level %d -> %d",
            outcome.value,
            item.word,
            item.proficiency_level,
            new_level,
        )
        return ReviewResult(
            vocabulary_id=vocabulary_id,
            previous_level=item.proficiency_level,
            new_level=new_level,
            next_review_at=next_review_at,
        )

    def list_due(
        self, owner_id: str, now: Optional[datetime] = None, limit: Optional[int] = None
    ) -> List[VocabularyItem]:
        """Items with ``next_review_at <= now``, oldest due first, one page long."""
        owner_id = require_owner(owner_id)
        limit = self._check_limit(limit, self._due_page_size)
        now = ensure_utc(now) if now else self._clock()
        return self._vocabulary.list_due(owner_id, now, limit)

    def list_distractors(
        self, owner_id: str, exclude_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[VocabularyItem]:
        """Recently created items to use as wrong answers, never ``exclude_id``."""
        owner_id = require_owner(owner_id)
        limit = self._check_limit(limit, self._distractor_pool_size)
        return self._vocabulary.list_recent(owner_id, limit, exclude_id=exclude_id)

    def _parse_outcome(self, outcome: Union[ReviewOutcome, str]) -> ReviewOutcome:
        try:
            parsed = ReviewOutcome(outcome)
        except ValueError:
            raise InputError(f"Unknown review outcome: {outcome!r}") from None
        if parsed not in self.ladder.transitions:
            accepted = ", ".join(o.value for o in self.ladder.outcomes)
            raise InputError(f"Outcome {parsed.value!r} not accepted; expected one of: {accepted}")
        return parsed

    @staticmethod
    def _check_limit(limit: Optional[int], default: int) -> int:
        if limit is None:
            return default
        if limit <= 0:
            raise InputError("limit must be positive")
        return limit
