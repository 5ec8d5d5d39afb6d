"""Shared pytest fixtures."""

import pytest
from fastapi.testclient import TestClient

from bgsim.api.dependencies import AppServices
from bgsim.core.config import ServiceConfig
from bgsim.main import create_app
from bgsim.services.card_catalog import JsonCardCatalog
from fakes import SAMPLE_CARDS, FakeLiveGame, RecordingSimulator


@pytest.fixture
def catalog():
    """Loaded catalog holding the sample cards."""
    cat = JsonCardCatalog()
    cat.replace_cards(SAMPLE_CARDS)
    return cat


@pytest.fixture
def live_game():
    return FakeLiveGame()


@pytest.fixture
def simulator(catalog):
    return RecordingSimulator(catalog)


@pytest.fixture
def services(catalog, live_game, simulator):
    return AppServices.create(catalog, live_game, simulator)


@pytest.fixture
def client(services):
    """Test client over an app wired with fakes."""
    app = create_app(services=services, config=ServiceConfig())
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sample_snapshot():
    """Wire-format snapshot with one minion per side."""
    return {
        "player": {
            "health": 30,
            "armor": 5,
            "tier": 3,
            "minions": [{"cardId": "BGS_004", "atk": 4, "hp": 5, "tags": ["taunt"]}],
        },
        "opponent": {
            "minions": [{"cardId": "BGS_039"}],
        },
    }
