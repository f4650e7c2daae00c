"""
Notebook Factory
Centralizes construction of the repository and scheduler from configuration.
"""

from wordflow.application.config import AppConfig
from wordflow.application.review_service import ReviewService
from wordflow.application.scheduler import Scheduler
from wordflow.domain.ports import NotebookRepository
from wordflow.infrastructure.yaml_notebook import YamlNotebookRepository


def get_notebook_repository(config: AppConfig) -> NotebookRepository:
    """
    Returns the notebook repository for the configured notebook.
    """
    return YamlNotebookRepository(config.notebook_dir, config.notebook)


def get_scheduler(config: AppConfig) -> Scheduler:
    return Scheduler(config.fsrs_parameters())


def get_review_service(config: AppConfig) -> ReviewService:
    return ReviewService(
        get_notebook_repository(config),
        get_scheduler(config),
        max_reviews=config.max_reviews_per_session,
        new_cards_per_day=config.new_cards_per_day,
    )
