"""
FSRS scheduler: maps (card, now, rating) to the card's next memory state.

Implements the FSRS-4.5 memory model with a 17-weight parameter vector.
Retrievability follows the power-law forgetting curve

    R(t, S) = (1 + FACTOR * t / S) ** DECAY

so that R equals the requested retention (90%) when t == S.

This is a pure computation module with no I/O. A Scheduler holds nothing but
its parameters and can be shared between threads.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from wordflow.domain.constants import (
    DECAY,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_MINIMUM_INTERVAL,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    FACTOR,
    LAPSE_STABILITY_CAP,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_STABILITY,
    NEW_AGAIN_STEP,
    NEW_GOOD_STEP,
    NEW_HARD_STEP,
    RELEARN_AGAIN_STEP,
    RELEARN_HARD_STEP,
    WEIGHT_COUNT,
)
from wordflow.domain.models import Card, Rating, State, coerce_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FsrsParameters:
    """
    Tunable inputs of the FSRS model.

    Attributes:
        weights: The 17 model weights (w0..w16).
        request_retention: Target recall probability at the due date.
        minimum_interval: Shortest interval in days for a graduated card.
        maximum_interval: Longest interval in days.
    """

    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    request_retention: float = DEFAULT_REQUEST_RETENTION
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL

    def __post_init__(self):
        weights = tuple(float(w) for w in self.weights)
        if len(weights) != WEIGHT_COUNT:
            raise ValueError(f"expected {WEIGHT_COUNT} FSRS weights, got {len(weights)}")
        if not all(math.isfinite(w) for w in weights):
            raise ValueError("FSRS weights must be finite numbers")
        if not 0 < self.request_retention < 1:
            raise ValueError("request_retention must be between 0 and 1 (exclusive)")
        if not 1 <= self.minimum_interval <= self.maximum_interval:
            raise ValueError("intervals must satisfy 1 <= minimum_interval <= maximum_interval")
        object.__setattr__(self, "weights", weights)


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


class Scheduler:
    """
    FSRS scheduler.

    ``repeat`` previews the outcome of every rating; ``next`` commits to one
    of them and is defined in terms of ``repeat`` so both paths always agree.
    Neither method mutates the card it is given.
    """

    def __init__(self, parameters: FsrsParameters | None = None):
        self.parameters = parameters or FsrsParameters()
        self._w = self.parameters.weights

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def repeat(self, card: Card, now: datetime) -> dict[Rating, Card]:
        """
        Compute the resulting card for each of the four ratings.

        Raises:
            InvalidStateError: If the card's state is not a known State.
        """
        state = coerce_state(card.state)
        elapsed = 0 if state == State.New else self._elapsed_days(card, now)

        base = replace(card, state=state, elapsed_days=elapsed, last_review=now)
        outcomes = {rating: replace(base) for rating in Rating}
        for rating in (Rating.Hard, Rating.Good, Rating.Easy):
            outcomes[rating].reps += 1

        if state == State.New:
            self._schedule_new(outcomes, now)
        elif state in (State.Learning, State.Relearning):
            self._schedule_learning(outcomes, state, now)
        else:
            self._schedule_review(outcomes, card, elapsed, now)

        return outcomes

    def next(self, card: Card, now: datetime, rating: Rating) -> Card:
        """Compute the single resulting card for ``rating``."""
        return self.repeat(card, now)[Rating(rating)]

    def retrievability(self, card: Card, now: datetime) -> float:
        """Current recall probability of ``card``; 1.0 if it was never reviewed."""
        if coerce_state(card.state) == State.New or card.last_review is None:
            return 1.0
        days = max((now - card.last_review).total_seconds() / 86400.0, 0.0)
        return self.forgetting_curve(days, max(card.stability, MIN_STABILITY))

    def forgetting_curve(self, elapsed_days: float, stability: float) -> float:
        return (1 + FACTOR * elapsed_days / stability) ** DECAY

    def next_interval(self, stability: float) -> int:
        """Days until retrievability falls to the requested retention."""
        # Exactly 1.0 at the default retention, so the interval equals S.
        ratio = (self.parameters.request_retention ** (1 / DECAY) - 1) / FACTOR
        # Halves round up.
        return self._cap(math.floor(stability * ratio + 0.5))

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _schedule_new(self, outcomes: dict[Rating, Card], now: datetime) -> None:
        for rating, card in outcomes.items():
            card.difficulty = self._init_difficulty(rating)
            card.stability = self._init_stability(rating)

        again, hard, good, easy = (outcomes[r] for r in Rating)
        again.state = hard.state = good.state = State.Learning
        easy.state = State.Review

        self._set_step(again, now, NEW_AGAIN_STEP)
        self._set_step(hard, now, NEW_HARD_STEP)
        self._set_step(good, now, NEW_GOOD_STEP)
        self._set_interval(easy, now, self.next_interval(easy.stability))

    def _schedule_learning(
        self, outcomes: dict[Rating, Card], state: State, now: datetime
    ) -> None:
        # Learning steps keep the memory state; only graduation assigns days.
        again, hard, good, easy = (outcomes[r] for r in Rating)
        again.state = hard.state = state
        good.state = easy.state = State.Review

        good_interval = self.next_interval(good.stability)
        easy_interval = self._cap(max(self.next_interval(easy.stability), good_interval + 1))

        self._set_step(again, now, RELEARN_AGAIN_STEP)
        self._set_step(hard, now, RELEARN_HARD_STEP)
        self._set_interval(good, now, good_interval)
        self._set_interval(easy, now, easy_interval)

    def _schedule_review(
        self, outcomes: dict[Rating, Card], card: Card, elapsed: int, now: datetime
    ) -> None:
        last_d = _clamp(card.difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)
        last_s = max(card.stability, MIN_STABILITY)
        retrievability = self.forgetting_curve(elapsed, last_s)

        again, hard, good, easy = (outcomes[r] for r in Rating)

        again.state = State.Relearning
        again.lapses += 1
        again.difficulty = self._next_difficulty(last_d, Rating.Again)
        # A lapse always lowers stability.
        again.stability = min(
            self._next_forget_stability(last_d, last_s, retrievability),
            card.stability * LAPSE_STABILITY_CAP,
        )

        for rating in (Rating.Hard, Rating.Good, Rating.Easy):
            outcome = outcomes[rating]
            outcome.state = State.Review
            outcome.difficulty = self._next_difficulty(last_d, rating)
            outcome.stability = self._next_recall_stability(
                last_d, last_s, retrievability, rating
            )

        hard_interval = self.next_interval(hard.stability)
        good_interval = self.next_interval(good.stability)
        hard_interval = min(hard_interval, good_interval)
        good_interval = self._cap(max(good_interval, hard_interval + 1))
        easy_interval = self._cap(max(self.next_interval(easy.stability), good_interval + 1))

        self._set_step(again, now, RELEARN_AGAIN_STEP)
        self._set_interval(hard, now, hard_interval)
        self._set_interval(good, now, good_interval)
        self._set_interval(easy, now, easy_interval)

        logger.debug(
            f"review {card.word_id}: elapsed={elapsed}d R={retrievability:.4f} "
            f"S={last_s:.4f} -> good S={good.stability:.4f} ({good_interval}d)"
        )

    # ------------------------------------------------------------------
    # Memory model
    # ------------------------------------------------------------------

    def _init_stability(self, rating: Rating) -> float:
        return max(self._w[rating - 1], MIN_STABILITY)

    def _init_difficulty(self, rating: Rating) -> float:
        return _clamp(self._w[4] - self._w[5] * (rating - 3), MIN_DIFFICULTY, MAX_DIFFICULTY)

    def _next_difficulty(self, difficulty: float, rating: Rating) -> float:
        next_d = difficulty - self._w[6] * (rating - 3)
        # Mean reversion towards the initial difficulty of a Good answer.
        reverted = self._w[7] * self._init_difficulty(Rating.Good) + (1 - self._w[7]) * next_d
        return _clamp(reverted, MIN_DIFFICULTY, MAX_DIFFICULTY)

    def _next_recall_stability(
        self, difficulty: float, stability: float, retrievability: float, rating: Rating
    ) -> float:
        hard_penalty = self._w[15] if rating == Rating.Hard else 1
        easy_bonus = self._w[16] if rating == Rating.Easy else 1
        return stability * (
            1
            + math.exp(self._w[8])
            * (11 - difficulty)
            * math.pow(stability, -self._w[9])
            * (math.exp((1 - retrievability) * self._w[10]) - 1)
            * hard_penalty
            * easy_bonus
        )

    def _next_forget_stability(
        self, difficulty: float, stability: float, retrievability: float
    ) -> float:
        return (
            self._w[11]
            * math.pow(difficulty, -self._w[12])
            * (math.pow(stability + 1, self._w[13]) - 1)
            * math.exp((1 - retrievability) * self._w[14])
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cap(self, interval: int) -> int:
        p = self.parameters
        return int(_clamp(interval, p.minimum_interval, p.maximum_interval))

    @staticmethod
    def _elapsed_days(card: Card, now: datetime) -> int:
        if card.last_review is None:
            return 0
        return max((now - card.last_review).days, 0)

    @staticmethod
    def _set_step(card: Card, now: datetime, minutes: int) -> None:
        card.scheduled_days = 0
        card.due = now + timedelta(minutes=minutes)

    @staticmethod
    def _set_interval(card: Card, now: datetime, days: int) -> None:
        card.scheduled_days = days
        card.due = now + timedelta(days=days)
