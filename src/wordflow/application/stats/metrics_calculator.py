"""
Metrics calculator for deriving insights from card memory state.

This is a pure computation module with no I/O.
"""

from dataclasses import dataclass
from datetime import datetime

from wordflow.application.scheduler import Scheduler
from wordflow.domain.models import Card, State


@dataclass
class CardMetrics:
    """
    Card state enriched with computed metrics.
    """

    # Card fields
    word_id: str
    state: State
    reps: int
    lapses: int
    scheduled_days: int
    stability: float
    difficulty: float

    # Computed metrics
    retrievability: float
    lapse_rate: float | None  # lapses / (reps + lapses)
    days_overdue: int | None  # Negative if not yet due


class MetricsCalculator:
    """
    Computes derived metrics from Card objects.

    Stateless and side-effect free.
    """

    def __init__(self, scheduler: Scheduler | None = None):
        self._scheduler = scheduler or Scheduler()

    def enrich(self, card: Card, now: datetime) -> CardMetrics:
        return CardMetrics(
            word_id=card.word_id,
            state=card.state,
            reps=card.reps,
            lapses=card.lapses,
            scheduled_days=card.scheduled_days,
            stability=card.stability,
            difficulty=card.difficulty,
            retrievability=self._scheduler.retrievability(card, now),
            lapse_rate=self._compute_lapse_rate(card),
            days_overdue=self._compute_days_overdue(card, now),
        )

    def _compute_lapse_rate(self, card: Card) -> float | None:
        """
        Compute lapse rate as lapses over all graded reviews.

        ``reps`` only counts successful answers, so lapses are added back.
        """
        total = card.reps + card.lapses
        if total == 0:
            return None
        return card.lapses / total

    def _compute_days_overdue(self, card: Card, now: datetime) -> int | None:
        """
        Compute whole days past the due date (negative if not yet due).

        New cards were never scheduled, so they have no overdue value.
        """
        if card.state == State.New:
            return None
        return int((now - card.due).total_seconds() // 86400)
