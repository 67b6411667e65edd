import pytest

from pointsapp.core.db.base import close_conn, get_conn, use_database
from pointsapp.core.db.migrations import migrate_if_needed
from pointsapp.domain import players as d_players


@pytest.fixture(autouse=True)
def db(tmp_path):
    use_database(str(tmp_path / "points.db"))
    migrate_if_needed(get_conn())
    yield get_conn()
    close_conn()


@pytest.fixture
def make_user():
    def _make(user_id, **profile):
        return d_players.register(user_id, **profile)
    return _make
