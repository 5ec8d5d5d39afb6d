"""Tests for the HTTP API routes."""

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from bgsim.api import sim
from bgsim.api.dependencies import AppServices
from bgsim.core.config import ServiceConfig
from bgsim.main import create_app
from bgsim.middleware.path_normalization import PathNormalizationMiddleware, normalize_path
from bgsim.models.simulator_models import Race
from bgsim.services.card_catalog import JsonCardCatalog
from fakes import DEFAULT_RESULT, FakeLiveGame, RecordingMinionFactory, RecordingSimulator

SUCCESS_BODY = {"win": 0.5, "tie": 0.2, "lose": 0.3, "simulations": 1000}


# =============================================================================
# Health and Routing Tests
# =============================================================================


class TestHealthEndpoint:
    """Tests for /health."""

    @pytest.mark.parametrize(
        "method", ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE", "FOO"]
    )
    def test_any_method(self, client, method):
        """Should answer ok to every method."""
        response = client.request(method, "/health")

        assert response.status_code == 200
        if method != "HEAD":
            assert response.json() == {"status": "ok"}

    def test_request_id_header(self, client):
        """Should tag responses with a request id."""
        response = client.get("/health")

        assert "X-Request-ID" in response.headers

    def test_request_id_reused(self, client):
        """Should echo a caller-supplied request id."""
        response = client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"


class TestRouting:
    """Tests for path normalization and routing errors."""

    @pytest.mark.parametrize("path", ["/CARDS", "/cards/", "/Cards//"])
    def test_path_case_and_trailing_slash(self, client, path):
        """Should route regardless of case and trailing slashes."""
        response = client.get(path)

        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_unknown_path(self, client):
        """Should answer unknown paths with not_found."""
        response = client.get("/favicon.ico")

        assert response.status_code == 404
        assert response.json() == {"error": "not_found"}

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/"),
            ("DELETE", "/builder"),
            ("POST", "/cards"),
            ("POST", "/simulate/from-current"),
            ("GET", "/simulate"),
            ("PUT", "/simulate"),
        ],
    )
    def test_wrong_method(self, client, method, path):
        """Should answer a known path with the wrong method with 405."""
        response = client.request(method, path)

        assert response.status_code == 405
        assert response.json() == {"error": "method_not_allowed"}

    def test_no_docs_routes(self, client):
        """Should not expose generated API docs."""
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404


# =============================================================================
# Builder Page Tests
# =============================================================================


class TestBuilderPage:
    """Tests for the builder page."""

    @pytest.mark.parametrize("path", ["/", "/builder", "/Builder/"])
    def test_serves_html(self, client, path):
        """Should serve the builder page at both paths."""
        response = client.get(path)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Board Builder" in response.text


# =============================================================================
# Cards Endpoint Tests
# =============================================================================


class TestCardsEndpoint:
    """Tests for GET /cards."""

    def test_lists_cards(self, client):
        """Should return the sorted Battlegrounds listing."""
        response = client.get("/cards")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["ready"] is True
        assert body["cards"][0] == {"id": "BGS_119", "name": "Amalgadon"}

    def test_not_ready(self, live_game, simulator):
        """Should report not ready before the catalog loads."""
        services = AppServices.create(JsonCardCatalog(), live_game, simulator)
        client = TestClient(create_app(services=services, config=ServiceConfig()))

        assert client.get("/cards").json() == {"ready": False, "cards": []}

    def test_served_from_cache(self, client, services):
        """Should count repeat calls as cache hits."""
        client.get("/cards")
        client.get("/cards")

        assert services.cards_cache.get_metrics().hits == 1


# =============================================================================
# Live Simulation Endpoint Tests
# =============================================================================


class TestSimulateFromCurrent:
    """Tests for GET /simulate/from-current."""

    def test_not_in_battlegrounds(self, client, live_game):
        """Should refuse when no Battlegrounds match is running."""
        response = client.get("/simulate/from-current")

        assert response.status_code == 400
        assert response.json() == {"error": "not_in_battlegrounds"}
        assert live_game.simulated_with == []

    def test_success(self, client, live_game):
        """Should return the live simulation result."""
        live_game.in_match = True

        response = client.get("/simulate/from-current")

        assert response.status_code == 200
        assert response.json() == SUCCESS_BODY

    def test_options_from_query(self, client, live_game):
        """Should read options from the query string ignoring key case."""
        live_game.in_match = True

        client.get("/simulate/from-current?ITERATIONS=250&timeoutms=40&Threads=3")

        options = live_game.simulated_with[0]
        assert options.iterations == 250
        assert options.timeout_ms == 40
        assert options.thread_count == 3

    def test_no_result(self, client, live_game):
        """Should report a failed simulation when nothing is returned."""
        live_game.in_match = True
        live_game.result = None

        response = client.get("/simulate/from-current")

        assert response.status_code == 500
        assert response.json() == {"error": "simulation_failed"}


# =============================================================================
# Custom Simulation Endpoint Tests
# =============================================================================


class TestSimulateCustom:
    """Tests for POST /simulate."""

    def test_success(self, client, simulator, sample_snapshot):
        """Should simulate the posted snapshot."""
        response = client.post("/simulate", json=sample_snapshot)

        assert response.status_code == 200
        assert response.json() == SUCCESS_BODY
        sim_input, options = simulator.calls[0]
        assert sim_input.player.health == 35
        assert options.iterations == 10000

    def test_works_outside_battlegrounds(self, client, live_game, sample_snapshot):
        """Should not require a live match."""
        assert live_game.in_match is False

        assert client.post("/simulate", json=sample_snapshot).status_code == 200

    def test_options_from_query(self, client, simulator, sample_snapshot):
        """Should pass query options through to the simulator."""
        client.post("/simulate?iterations=42&timeoutMs=7", json=sample_snapshot)

        options = simulator.calls[0][1]
        assert options.iterations == 42
        assert options.timeout_ms == 7
        assert options.thread_count is None

    @pytest.mark.parametrize("body", [b"", b"   \n\t "])
    def test_empty_body(self, client, body):
        """Should reject a missing or blank body."""
        response = client.post("/simulate", content=body)

        assert response.status_code == 400
        assert response.json() == {"error": "empty_body"}

    @pytest.mark.parametrize(
        "body",
        [b"{not json", b"[1, 2, 3]", b'"text"', b'{"player": {"minions": 5}}'],
    )
    def test_invalid_body(self, client, simulator, body):
        """Should reject bodies that do not parse as a snapshot."""
        response = client.post("/simulate", content=body)

        assert response.status_code == 400
        assert response.json() == {"error": "invalid_body"}
        assert simulator.calls == []

    def test_missing_side(self, client, simulator):
        """Should fail the simulation when a side is missing."""
        response = client.post("/simulate", content=json.dumps({"player": {}}))

        assert response.status_code == 500
        assert response.json() == {"error": "simulation_failed"}
        assert simulator.calls == []

    def test_unknown_card(self, client):
        """Should fail the simulation for a card the factory cannot build."""
        body = {"player": {"minions": [{"cardId": "NOPE_001"}]}, "opponent": {}}

        response = client.post("/simulate", json=body)

        assert response.status_code == 500
        assert response.json() == {"error": "simulation_failed"}

    def test_foreign_factory_error(self, client, simulator):
        """Should report any factory exception as a failed simulation."""
        simulator.minion_factory = RecordingMinionFactory(unknown={"NOPE_001"})
        body = {"player": {"minions": [{"cardId": "NOPE_001"}]}, "opponent": {}}

        response = client.post("/simulate", json=body)

        assert response.status_code == 500
        assert response.json() == {"error": "simulation_failed"}
        assert simulator.calls == []

    def test_simulator_error(self, catalog, live_game, sample_snapshot):
        """Should report a simulator exception as a failed simulation."""
        simulator = RecordingSimulator(catalog, error=RuntimeError("crash"))
        services = AppServices.create(catalog, live_game, simulator)
        client = TestClient(create_app(services=services, config=ServiceConfig()))

        response = client.post("/simulate", json=sample_snapshot)

        assert response.status_code == 500
        assert response.json() == {"error": "simulation_failed"}

    def test_unhandled_error(self, client, services, sample_snapshot):
        """Should answer unexpected handler errors with server_error."""
        with patch.object(
            services.simulation, "simulate_custom", side_effect=RuntimeError("bug")
        ):
            response = client.post("/simulate", json=sample_snapshot)

        assert response.status_code == 500
        assert response.json() == {"error": "server_error"}
        assert client.post("/simulate", json=sample_snapshot).status_code == 200


# =============================================================================
# Option Parsing Tests
# =============================================================================


class TestParseSimulationOptions:
    """Tests for parse_simulation_options."""

    def test_defaults(self):
        """Should default when no parameters are given."""
        options = sim.parse_simulation_options({})

        assert options.iterations == 10000
        assert options.timeout_ms is None
        assert options.thread_count is None

    @pytest.mark.parametrize("value", ["abc", "0", "-5", "", "1.5"])
    def test_bad_values_fall_back(self, value):
        """Should ignore values that are not positive integers."""
        options = sim.parse_simulation_options({"iterations": value, "threads": value})

        assert options.iterations == 10000
        assert options.thread_count is None

    def test_whitespace_trimmed(self):
        """Should accept padded numbers."""
        assert sim.parse_simulation_options({"iterations": " 300 "}).iterations == 300


# =============================================================================
# Disconnect Tests
# =============================================================================


class TestClientDisconnect:
    """Tests for abandoning a simulation when the caller goes away."""

    def test_disconnect_cancels_wait(self, monkeypatch):
        """Should stop waiting and cancel the pending run."""
        monkeypatch.setattr(sim, "DISCONNECT_POLL_SECONDS", 0.01)
        request = MagicMock()

        async def disconnected():
            return True

        request.is_disconnected = disconnected
        cancelled = []

        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        async def main():
            with pytest.raises(sim.ClientDisconnected):
                await sim._await_unless_disconnected(request, slow())
            await asyncio.sleep(0)

        asyncio.run(main())

        assert cancelled == [True]

    def test_disconnect_response(self, monkeypatch):
        """Should answer 499 client_closed_request after a disconnect."""
        monkeypatch.setattr(sim, "DISCONNECT_POLL_SECONDS", 0.01)
        request = MagicMock()
        request.url.path = "/simulate"

        async def disconnected():
            return True

        request.is_disconnected = disconnected

        async def main():
            return await sim._simulation_response(request, asyncio.sleep(5))

        response = asyncio.run(main())

        assert response.status_code == 499
        assert json.loads(response.body) == {"error": "client_closed_request"}

    def test_connected_caller_gets_result(self, monkeypatch):
        """Should keep polling while the caller stays connected."""
        monkeypatch.setattr(sim, "DISCONNECT_POLL_SECONDS", 0.01)
        request = MagicMock()

        async def connected():
            return False

        request.is_disconnected = connected

        async def slow_result():
            await asyncio.sleep(0.05)
            return DEFAULT_RESULT

        result = asyncio.run(sim._await_unless_disconnected(request, slow_result()))

        assert result == DEFAULT_RESULT


# =============================================================================
# App Lifecycle Tests
# =============================================================================


class TestAppLifecycle:
    """Tests for startup loading and CORS configuration."""

    def test_startup_loads_catalog(self, tmp_path, live_game, simulator):
        """Should load the card file when the app starts."""
        path = tmp_path / "cards.json"
        path.write_text(
            json.dumps([{"id": "BGS_004", "name": "Wrath Weaver", "type": "MINION"}]),
            encoding="utf-8",
        )
        catalog = JsonCardCatalog(path)
        services = AppServices.create(catalog, live_game, simulator, catalog_loader=catalog.load)

        with TestClient(create_app(services=services, config=ServiceConfig())) as client:
            body = client.get("/cards").json()

        assert body == {"ready": True, "cards": [{"id": "BGS_004", "name": "Wrath Weaver"}]}

    def test_startup_survives_missing_file(self, tmp_path, live_game, simulator):
        """Should keep serving when the card file cannot be read."""
        catalog = JsonCardCatalog(tmp_path / "missing.json")
        services = AppServices.create(catalog, live_game, simulator, catalog_loader=catalog.load)

        with TestClient(create_app(services=services, config=ServiceConfig())) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/cards").json()["ready"] is False

    def test_startup_survives_non_object_entries(self, tmp_path, live_game, simulator):
        """Should report not ready when the card file holds a non-object entry."""
        path = tmp_path / "cards.json"
        path.write_text(json.dumps(["BGS_004", 7]), encoding="utf-8")
        catalog = JsonCardCatalog(path)
        services = AppServices.create(catalog, live_game, simulator, catalog_loader=catalog.load)

        with TestClient(create_app(services=services, config=ServiceConfig())) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/cards").json() == {"ready": False, "cards": []}

    def test_cors_origins(self, services):
        """Should allow configured browser origins."""
        config = ServiceConfig(cors_origins=("http://localhost:5173",))
        client = TestClient(create_app(services=services, config=config))

        response = client.get("/cards", headers={"Origin": "http://localhost:5173"})

        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_no_cors_by_default(self, client):
        """Should not add CORS headers without configured origins."""
        response = client.get("/cards", headers={"Origin": "http://localhost:5173"})

        assert "access-control-allow-origin" not in response.headers

    def test_live_game_races_reach_simulator(self, catalog, simulator, sample_snapshot):
        """Should wire the live game into snapshot translation."""
        services = AppServices.create(catalog, FakeLiveGame(races={Race.MURLOC}), simulator)
        client = TestClient(create_app(services=services, config=ServiceConfig()))

        client.post("/simulate", json=sample_snapshot)

        assert simulator.calls[0][0].available_races == [Race.MURLOC]


# =============================================================================
# Path Normalization Tests
# =============================================================================


class TestPathNormalization:
    """Tests for the path and method normalizing middleware."""

    @pytest.mark.parametrize(
        "path,expected",
        [("/", "/"), ("", "/"), ("///", "/"), ("/Simulate/From-Current/", "/simulate/from-current")],
    )
    def test_normalize_path(self, path, expected):
        """Should lowercase and trim trailing slashes."""
        assert normalize_path(path) == expected

    def test_method_uppercased(self):
        """Should hand the app an upper-case method."""
        seen = {}

        async def inner(scope, receive, send):
            seen.update(method=scope["method"], path=scope["path"])

        middleware = PathNormalizationMiddleware(inner)
        scope = {"type": "http", "method": "post", "path": "/SIMULATE/"}

        asyncio.run(middleware(scope, None, None))

        assert seen == {"method": "POST", "path": "/simulate"}

    def test_lifespan_untouched(self):
        """Should pass non-HTTP scopes through unchanged."""
        seen = []

        async def inner(scope, receive, send):
            seen.append(scope)

        scope = {"type": "lifespan"}
        asyncio.run(PathNormalizationMiddleware(inner)(scope, None, None))

        assert seen == [scope]
