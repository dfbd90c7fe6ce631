import pytest

import session_logic
from app_types import Level, PlayerStatus
from tests.utils import make_player


@pytest.fixture(autouse=True)
def isolated_sessions_dir(tmp_path, monkeypatch):
    """Keeps pickled sessions out of the working directory."""
    monkeypatch.setattr(session_logic, "SESSIONS_DIR", str(tmp_path / "sessions"))


@pytest.fixture
def sample_players():
    """Returns a list of eight available players, two per level."""
    return [
        make_player("Alice", 0, Level.A),
        make_player("Bob", 0, Level.B),
        make_player("Charlie", 0, Level.C),
        make_player("Dave", 1, Level.C),
        make_player("Eve", 1, Level.B),
        make_player("Frank", 2, Level.A),
        make_player("Grace", 2, Level.D),
        make_player("Heidi", 3, Level.D),
    ]


@pytest.fixture
def balanced_players():
    """Four B/C players that always form a valid match."""
    return [
        make_player("P1", 0, Level.B),
        make_player("P2", 0, Level.B),
        make_player("P3", 0, Level.C),
        make_player("P4", 0, Level.C),
    ]


@pytest.fixture
def unavailable_player():
    return make_player("Zed", 0, Level.B, status=PlayerStatus.IN_PROGRESS)
