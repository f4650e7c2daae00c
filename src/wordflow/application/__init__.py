# Application Package
from .review_service import ReviewService, limit_session
from .scheduler import FsrsParameters, Scheduler
from .selector import due_words
from .session import ReviewSession

__all__ = [
    "FsrsParameters",
    "Scheduler",
    "due_words",
    "ReviewSession",
    "ReviewService",
    "limit_session",
]
