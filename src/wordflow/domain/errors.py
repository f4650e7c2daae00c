"""Error taxonomy for wordflow."""


class WordflowError(Exception):
    """Base class for all wordflow errors."""


class InvalidStateError(WordflowError):
    """A card carries a state outside New/Learning/Review/Relearning.

    This signals corrupted data upstream and is never handled locally.
    """


class InvalidOperationError(WordflowError):
    """An operation was called on an object that cannot accept it (e.g. a finished session)."""


class NotebookError(WordflowError):
    """Reading or writing a notebook failed."""
