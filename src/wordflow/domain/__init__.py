# Domain Package
from .errors import InvalidOperationError, InvalidStateError, NotebookError, WordflowError
from .models import Card, Rating, SessionResult, State, WordNote, coerce_state, new_card, word_id
from .ports import MarkAction, NotebookRepository

__all__ = [
    "Card",
    "Rating",
    "State",
    "WordNote",
    "SessionResult",
    "new_card",
    "coerce_state",
    "word_id",
    "MarkAction",
    "NotebookRepository",
    "WordflowError",
    "InvalidStateError",
    "InvalidOperationError",
    "NotebookError",
]
