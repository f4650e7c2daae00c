"""
Ports (interfaces) for notebook persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from enum import Enum

from .models import Card, WordNote


class MarkAction(str, Enum):
    LEARNING = "learning"
    LEARNED = "learned"
    DELETE = "delete"


class NotebookRepository(ABC):
    """
    Port for reading and writing one notebook of words and their cards.

    Implementations:
        - YamlNotebookRepository: One YAML file per notebook.
    """

    @abstractmethod
    def mark(self, word: str, action: MarkAction) -> WordNote | None:
        """
        Record a lookup of ``word``.

        Args:
            word: The word as typed by the user.
            action: LEARNING bumps the lookup counter (creating the note and
                a New card on first sight), LEARNED lowers it, DELETE removes
                the note and its card.

        Returns:
            The updated note, or None after a delete.
        """
        pass

    @abstractmethod
    def list_notes(self) -> list[WordNote]:
        """Return all notes, most recently created first."""
        pass

    @abstractmethod
    def list_notebooks(self) -> list[str]:
        """Return the names of all notebooks stored next to this one."""
        pass

    @abstractmethod
    def load_cards(self) -> list[Card]:
        """Return a consistent snapshot of every card in the notebook."""
        pass

    @abstractmethod
    def save_cards(self, cards: list[Card]) -> None:
        """Insert or replace the given cards, keyed by word_id."""
        pass
