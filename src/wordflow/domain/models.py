"""
Domain models for vocabulary cards and review sessions.

These are pure data structures with no I/O or external dependencies.
"""

import hashlib
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone
from enum import IntEnum

from wordflow.domain.errors import InvalidStateError


class State(IntEnum):
    """Learning state of a card. The integer value is the persisted tag."""

    New = 0
    Learning = 1
    Review = 2
    Relearning = 3


class Rating(IntEnum):
    """Recall quality reported by the user, worst to best."""

    Again = 1  # Complete failure
    Hard = 2  # Difficult recall
    Good = 3  # Moderate effort
    Easy = 4  # Very easy


def coerce_state(value) -> State:
    """Convert a stored state tag to a State, rejecting unknown tags."""
    try:
        return State(value)
    except ValueError:
        raise InvalidStateError(f"unknown card state: {value!r}") from None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def word_id(word: str) -> str:
    """Stable identifier of a word: md5 hex digest of its UTF-8 bytes."""
    return hashlib.md5(word.encode("utf-8")).hexdigest()


@dataclass
class Card:
    """
    Spaced-repetition memory state of one vocabulary item.

    Attributes:
        word_id: Identifier of the word (see ``word_id``).
        notebook: Notebook the card belongs to.
        due: Moment the card next becomes eligible for review.
        stability: Days until recall probability decays to 90%.
        difficulty: Intrinsic difficulty, 1-10 once reviewed (0 while New).
        elapsed_days: Days between the previous review and the latest one.
        scheduled_days: Interval chosen at the latest review.
        reps: Successful (non-Again) reviews.
        lapses: Times the card was forgotten while in Review.
        state: Current learning state.
        last_review: Time of the latest review, None if never reviewed.
        created_at: Creation time of the owning note.
    """

    word_id: str
    notebook: str
    due: datetime
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: State = State.New
    last_review: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_new(self) -> bool:
        return self.state == State.New

    @property
    def is_learning(self) -> bool:
        return self.state == State.Learning

    @property
    def is_review(self) -> bool:
        return self.state == State.Review

    def is_due(self, now: datetime | None = None) -> bool:
        return self.due <= (now or utcnow())

    def update_from(self, other: "Card") -> None:
        """Copy the scheduling fields of ``other`` into this card.

        Identity fields (word_id, notebook, created_at) are left untouched.
        """
        for f in fields(self):
            if f.name in ("word_id", "notebook", "created_at"):
                continue
            setattr(self, f.name, getattr(other, f.name))


def new_card(word_id: str, notebook: str, now: datetime | None = None) -> Card:
    """Create a card that has never been reviewed and is due immediately."""
    now = now or utcnow()
    return Card(word_id=word_id, notebook=notebook, due=now, created_at=now)


@dataclass
class WordNote:
    """A word recorded in a notebook. Times are epoch seconds."""

    word_id: str
    word: str
    lookup_times: int = 0
    create_time: int = 0
    last_lookup_time: int = 0


@dataclass
class SessionResult:
    """Outcome of a review session, handed back for persistence and display."""

    reviewed: list[Card]
    completed: int
    skipped: int
    duration: timedelta

    @property
    def success_rate(self) -> float | None:
        """Percentage of presented cards that were rated rather than skipped."""
        if self.completed == 0:
            return None
        return self.completed / (self.completed + self.skipped) * 100
