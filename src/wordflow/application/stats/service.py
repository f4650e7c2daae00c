"""
Notebook Stats Service: Application layer orchestrator.

Coordinates loading cards from the repository and enriching them with computed metrics.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from wordflow.application.scheduler import Scheduler
from wordflow.application.selector import due_words
from wordflow.domain.constants import (
    WEAK_LAPSE_THRESHOLD,
    WEAK_RETRIEVABILITY_THRESHOLD,
    WEAK_STABILITY_THRESHOLD,
)
from wordflow.domain.models import State, coerce_state
from wordflow.domain.ports import NotebookRepository

from .metrics_calculator import CardMetrics, MetricsCalculator

logger = logging.getLogger(__name__)


@dataclass
class NotebookSummary:
    """Aggregate view of a notebook's cards."""

    total: int
    due: int
    by_state: dict[str, int] = field(default_factory=dict)
    average_stability: float | None = None
    average_difficulty: float | None = None
    average_retrievability: float | None = None


class NotebookStatsService:
    """
    Application service for notebook statistics.

    Follows Dependency Inversion: depends on the NotebookRepository abstraction,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        repository: NotebookRepository,
        scheduler: Scheduler | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repository: The repository (port) for loading cards.
            scheduler: Scheduler whose forgetting curve is used for retrievability.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repository
        self._calc = calculator or MetricsCalculator(scheduler)

    def get_metrics(self, now: datetime) -> list[CardMetrics]:
        return [self._calc.enrich(card, now) for card in self._repo.load_cards()]

    def summary(self, now: datetime) -> NotebookSummary:
        cards = self._repo.load_cards()
        metrics = [self._calc.enrich(card, now) for card in cards]

        by_state = {state.name: 0 for state in State}
        for m in metrics:
            by_state[coerce_state(m.state).name] += 1

        # Averages only make sense for cards that have a memory state.
        seen = [m for m in metrics if m.state != State.New]
        summary = NotebookSummary(
            total=len(cards),
            due=len(due_words(cards, now)),
            by_state=by_state,
        )
        if seen:
            summary.average_stability = sum(m.stability for m in seen) / len(seen)
            summary.average_difficulty = sum(m.difficulty for m in seen) / len(seen)
            summary.average_retrievability = sum(m.retrievability for m in seen) / len(seen)
        return summary

    def weak_words(
        self,
        now: datetime,
        stability_threshold: float = WEAK_STABILITY_THRESHOLD,
        lapse_threshold: int = WEAK_LAPSE_THRESHOLD,
        retrievability_threshold: float = WEAK_RETRIEVABILITY_THRESHOLD,
    ) -> list[CardMetrics]:
        """
        Identify reviewed cards that are "weak" based on configurable thresholds.

        A card is weak if:
        - stability < threshold, OR
        - lapses >= lapse threshold, OR
        - retrievability < retrievability threshold

        New cards are never weak; they have no memory state yet.

        Returns:
            Weak cards, weakest (lowest retrievability) first.
        """
        weak = []

        for card in self.get_metrics(now):
            if card.state == State.New:
                continue

            is_weak = False

            # Low stability
            if card.stability < stability_threshold:
                is_weak = True

            # Has lapses
            if card.lapses >= lapse_threshold:
                is_weak = True

            # Low retrievability
            if card.retrievability < retrievability_threshold:
                is_weak = True

            if is_weak:
                weak.append(card)

        weak.sort(key=lambda m: m.retrievability)
        logger.debug(f"{len(weak)} weak words found")
        return weak
