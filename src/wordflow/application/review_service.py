"""
Review Service: Application layer orchestrator.

Loads a notebook's cards, selects and limits the due words for a session,
and hands reviewed cards back to the repository.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from wordflow.application.scheduler import Scheduler
from wordflow.application.selector import due_words
from wordflow.application.session import ReviewSession
from wordflow.domain.constants import DEFAULT_MAX_REVIEWS, DEFAULT_NEW_CARDS_PER_DAY
from wordflow.domain.models import Card, SessionResult, State, coerce_state
from wordflow.domain.ports import NotebookRepository

logger = logging.getLogger(__name__)


def limit_session(
    ordered: list[Card],
    max_reviews: int = DEFAULT_MAX_REVIEWS,
    new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
) -> list[Card]:
    """
    Truncate an ordered due list to the configured session size.

    At most ``new_cards_per_day`` New cards are kept, then the list is cut to
    ``max_reviews`` cards. The relative order is preserved.
    """
    kept: list[Card] = []
    new_count = 0
    for card in ordered:
        if card.state == State.New:
            if new_count >= new_cards_per_day:
                continue
            new_count += 1
        kept.append(card)
        if len(kept) >= max_reviews:
            break
    return kept


class ReviewService:
    """
    Application service for planning, running and saving review sessions.

    Depends on the NotebookRepository abstraction, not a concrete store.
    """

    def __init__(
        self,
        repository: NotebookRepository,
        scheduler: Scheduler | None = None,
        max_reviews: int = DEFAULT_MAX_REVIEWS,
        new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    ):
        self._repo = repository
        self._scheduler = scheduler or Scheduler()
        self.max_reviews = max_reviews
        self.new_cards_per_day = new_cards_per_day

    def due(self, now: datetime) -> list[Card]:
        """
        All due cards in session order, without limits.

        Raises:
            InvalidStateError: If a due card carries an unknown state tag.
        """
        cards = due_words(self._repo.load_cards(), now)
        for card in cards:
            card.state = coerce_state(card.state)
        return cards

    def plan(self, now: datetime) -> list[Card]:
        """Due cards for one session, limited by the configured caps."""
        ordered = self.due(now)
        planned = limit_session(ordered, self.max_reviews, self.new_cards_per_day)
        if len(planned) < len(ordered):
            logger.info(f"Limited session to {len(planned)} of {len(ordered)} due words")
        return planned

    def start(
        self, now: datetime, clock: Callable[[], datetime] | None = None
    ) -> ReviewSession:
        return ReviewSession(self.plan(now), self._scheduler, clock=clock)

    def commit(self, result: SessionResult) -> int:
        """Persist the cards reviewed in a session. Returns how many were saved."""
        if not result.reviewed:
            return 0
        self._repo.save_cards(result.reviewed)
        logger.info(
            f"Saved {len(result.reviewed)} reviewed cards "
            f"({result.completed} completed, {result.skipped} skipped)"
        )
        return len(result.reviewed)
