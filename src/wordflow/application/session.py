"""
Review session controller.

Walks an ordered list of cards one at a time. Each card is either rated,
which runs it through the scheduler and updates the card object in place,
or skipped, which leaves it untouched. The controller holds only in-memory
state and must not be shared between threads.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from wordflow.application.scheduler import Scheduler
from wordflow.domain.errors import InvalidOperationError
from wordflow.domain.models import Card, Rating, SessionResult, utcnow

logger = logging.getLogger(__name__)


class ReviewSession:
    """
    Drives one interactive review through a fixed sequence of cards.

    Args:
        cards: Cards in presentation order. The session mutates them on rating.
        scheduler: Scheduler used to compute the next card state.
        clock: Returns the current time; defaults to UTC wall clock.
    """

    def __init__(
        self,
        cards: list[Card],
        scheduler: Scheduler,
        clock: Callable[[], datetime] | None = None,
    ):
        self._cards = list(cards)
        self._scheduler = scheduler
        self._clock = clock or utcnow
        self._index = 0
        self._reviewed: list[Card] = []
        self.completed = 0
        self.skipped = 0
        self.started_at = self._clock()

    @property
    def current(self) -> Card | None:
        if self.is_complete:
            return None
        return self._cards[self._index]

    @property
    def position(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self._cards)

    @property
    def remaining(self) -> int:
        return len(self._cards) - self._index

    @property
    def is_complete(self) -> bool:
        return self._index >= len(self._cards)

    def preview(self) -> dict[Rating, Card]:
        """Outcome of every rating for the current card, without committing."""
        card = self._require_current("preview")
        return self._scheduler.repeat(card, self._clock())

    def rate(self, rating: Rating) -> Card:
        """Schedule the current card with ``rating`` and move to the next one."""
        card = self._require_current("rate")
        updated = self._scheduler.next(card, self._clock(), Rating(rating))
        card.update_from(updated)

        self._reviewed.append(card)
        self.completed += 1
        self._index += 1
        logger.debug(
            f"rated {card.word_id} {Rating(rating).name}: "
            f"state={card.state.name} due={card.due.isoformat()}"
        )
        return card

    def skip(self) -> None:
        """Move past the current card without scheduling it."""
        card = self._require_current("skip")
        self.skipped += 1
        self._index += 1
        logger.debug(f"skipped {card.word_id}")

    def results(self) -> SessionResult:
        return SessionResult(
            reviewed=list(self._reviewed),
            completed=self.completed,
            skipped=self.skipped,
            duration=self._clock() - self.started_at,
        )

    def _require_current(self, operation: str) -> Card:
        card = self.current
        if card is None:
            raise InvalidOperationError(f"cannot {operation}: review session is complete")
        return card
