"""
Due-word selection for review sessions.

Picks the cards that can be reviewed now and orders them:
1. New cards before anything already scheduled
2. Scheduled cards by due time, most overdue first
3. Ties by note creation time, newest word first (then word_id)
"""

from collections.abc import Iterable, Mapping
from datetime import datetime

from wordflow.domain.models import Card, State


def due_words(
    cards: Iterable[Card],
    now: datetime,
    created_at: Mapping[str, datetime] | None = None,
) -> list[Card]:
    """
    Return the cards eligible for review at ``now`` in session order.

    Args:
        cards: Snapshot of a notebook's cards.
        now: Reference time.
        created_at: Optional word_id -> note creation time. Cards missing from
            the mapping use their own ``created_at``.

    Returns:
        A new list on every call. Session-size limits are not applied here.
    """
    created_at = created_at or {}

    def creation(card: Card) -> datetime:
        return created_at.get(card.word_id, card.created_at)

    eligible = [c for c in cards if c.state == State.New or c.due <= now]

    # Stable sorts, least significant key first.
    eligible.sort(key=lambda c: c.word_id)
    eligible.sort(key=creation, reverse=True)
    eligible.sort(key=lambda c: (c.state != State.New, c.due if c.state != State.New else now))
    return eligible
