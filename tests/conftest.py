"""Shared test fixtures."""

import pytest

from state import DEFAULT_CONFIG, initialize_game
from tests.helpers import make_state


@pytest.fixture
def state():
    """Empty 10x10 plains game, human to act."""
    return make_state()


@pytest.fixture
def new_game():
    """Fully initialized 20x15 game (seed=42)."""
    return initialize_game(20, 15, seed=42, config=dict(DEFAULT_CONFIG))


@pytest.fixture
def api_client():
    """Flask test client."""
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
