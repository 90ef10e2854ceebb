from datetime import datetime, timezone

import pytest

from expert_maker.catalog import Catalog
from expert_maker.models import FocusArea, QuizTemplate, Topic


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_expert_maker.db")
    return db_path


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 2, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def small_catalog():
    """Two tiny topics: one with a sparse quiz bank, one with none."""
    sparse = Topic(
        id="sparse",
        title="Sparse",
        focus_areas=(FocusArea(id="a", title="Alpha"), FocusArea(id="b", title="Beta")),
        quiz_bank=(
            QuizTemplate(id="sp-1", focus_id="b", question="B?", options=("x", "y"), answer_index=0),
        ),
    )
    empty = Topic(id="empty", title="Empty", focus_areas=(FocusArea(id="only", title="Only"),))
    return Catalog([sparse, empty])
