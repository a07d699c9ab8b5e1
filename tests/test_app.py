from unittest import mock

import pytest

from conftest import FakeFeed, make_game, ok
from league_tracker.config import Settings
from league_tracker.errors import StoreError
from league_tracker.scheduler import SyncScheduler
from league_tracker.service import LeagueService
from league_tracker_app import LeagueTracker

HTMX = {"HX-Request": "true"}

GAMES = [
    make_game("g2", "Prague Lions", "Stuttgart Surge", 7, 3, date="2025-06-08"),
    make_game("g1", "Vienna Vikings", "Prague Lions", 10, 0, date="2025-06-01"),
    make_game("g3", "Rhein Fire", "Vienna Vikings", 0, 0, date="2025-06-15"),
]
DEMO = [make_game("demo-1", "Barcelona", "Real Madrid")]


@pytest.fixture
def service(memory_store, reference):
    memory_store.replace_all(GAMES)
    scheduler = SyncScheduler(FakeFeed(ok(*GAMES)), memory_store, fallback_games=DEMO)
    return LeagueService(memory_store, scheduler, reference)


@pytest.fixture
def client(service):
    tracker = LeagueTracker(service=service, settings=Settings(), start_sync=False)
    tracker.app.config["TESTING"] = True
    return tracker.app.test_client()


def test_schedule_json_is_ordered_feed_objects(client):
    response = client.get("/api/schedule")

    assert response.status_code == 200
    payload = response.get_json()
    assert [game["statcrewID"] for game in payload] == ["g1", "g2", "g3"]
    assert payload[0]["homename"] == "Vienna Vikings"
    assert payload[0]["homeScore"] == 10


def test_schedule_fragment_for_htmx(client):
    response = client.get("/api/schedule", headers=HTMX)

    assert response.mimetype == "text/html"
    body = response.get_data(as_text=True)
    assert "<table" in body
    assert "10 - 0" in body
    assert "Rhein Fire" in body


def test_scoreboard_json(client):
    payload = client.get("/api/scoreboard").get_json()

    assert [division["division"] for division in payload] == ["EAST", "WEST"]
    east = payload[0]["teams"]
    assert [(team["team_name"], team["record"], team["position"]) for team in east] == [
        ("Vienna Vikings", "1-0", 1),
        ("Prague Lions", "1-1", 2),
    ]


def test_scoreboard_fragment_for_htmx(client):
    body = client.get("/api/scoreboard", headers=HTMX).get_data(as_text=True)
    assert "<h3>EAST</h3>" in body
    assert "1-1" in body


def test_empty_store_reads_are_not_errors(memory_store, reference):
    scheduler = SyncScheduler(FakeFeed(ok()), memory_store)
    tracker = LeagueTracker(service=LeagueService(memory_store, scheduler, reference), settings=Settings(), start_sync=False)
    client = tracker.app.test_client()

    assert client.get("/api/schedule").get_json() == []
    assert client.get("/api/scoreboard").get_json() == []
    assert "No games have been played yet" in client.get("/api/scoreboard", headers=HTMX).get_data(as_text=True)


def test_refresh_is_fire_and_forget(client, service):
    with mock.patch.object(service.scheduler, "trigger") as trigger:
        response = client.get("/api/refresh")

    assert response.get_json() == {"message": "Data refresh initiated"}
    trigger.assert_called_once_with()


def test_refresh_fragment_for_htmx(client, service):
    with mock.patch.object(service.scheduler, "trigger"):
        body = client.get("/api/refresh", headers=HTMX).get_data(as_text=True)
    assert "Data refresh initiated" in body


def test_mock_route_replaces_snapshot_with_demo_games(client):
    response = client.get("/api/mock")

    assert response.get_json() == {"message": "Mock data inserted successfully"}
    assert [game["statcrewID"] for game in client.get("/api/schedule").get_json()] == ["demo-1"]
    assert client.get("/api/status").get_json()["using_fallback"] is True


def test_status_reports_game_count(client):
    status = client.get("/api/status").get_json()
    assert status["games"] == 3
    assert status["last_error"] is None
    assert status["running"] is False


def test_store_error_becomes_500(client, service):
    with mock.patch.object(service.store, "read_all", side_effect=StoreError("read failed: disk I/O error")):
        response = client.get("/api/scoreboard")

    assert response.status_code == 500
    assert response.get_json() == {"error": "read failed: disk I/O error"}


def test_responses_are_not_cached(client):
    response = client.get("/api/schedule")
    assert "no-store" in response.headers["Cache-Control"]
    assert "no-cache" in response.headers["Cache-Control"]


def test_dashboard_renders(client):
    body = client.get("/").get_data(as_text=True)
    assert "European League Football" in body
    assert 'hx-get="/api/scoreboard"' in body


def test_team_code_lookup(service):
    assert service.team_name("fevv2511") == "Vienna Vikings"
    assert service.team_name("unknown1") == "unknown1"
