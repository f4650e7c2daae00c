from datetime import datetime, timedelta, timezone

import pytest

from wordflow.application.scheduler import Scheduler
from wordflow.domain.models import Card, State

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return T0


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def review_card():
    """A card in Review: stability 10, difficulty 5, last reviewed 10 days before T0."""
    return Card(
        word_id="w-review",
        notebook="test",
        due=T0,
        stability=10.0,
        difficulty=5.0,
        elapsed_days=4,
        scheduled_days=10,
        reps=3,
        lapses=0,
        state=State.Review,
        last_review=T0 - timedelta(days=10),
        created_at=T0 - timedelta(days=30),
    )


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/notebooks
    monkeypatch.setenv("HOME", str(home))
    for key in (
        "WORDFLOW_NOTEBOOK",
        "WORDFLOW_NOTEBOOK_DIR",
        "WORDFLOW_MAX_REVIEWS_PER_SESSION",
        "WORDFLOW_NEW_CARDS_PER_DAY",
        "WORDFLOW_WEIGHTS",
    ):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def notebook_dir(tmp_path):
    d = tmp_path / "notebooks"
    d.mkdir()
    return d
