import pytest

from league_tracker.db import DatabaseManager
from league_tracker.errors import TransportError
from league_tracker.feed_client import FetchResult
from league_tracker.models import GameRecord
from league_tracker.reference import ReferenceData
from league_tracker.store import MemorySnapshotStore, SqlSnapshotStore


def make_game(game_id, home, away, home_score=0, away_score=0, date="2025-06-01", time="15:00", week=1):
    return GameRecord(
        game_id=game_id,
        home_team=home,
        away_team=away,
        date=date,
        time=time,
        week=week,
        location=f"{home} Stadium",
        home_score=home_score,
        away_score=away_score,
        slug=game_id,
        game_date=f"{date}T{time}:00",
    )


class FakeFeed:
    """Feed client double returning queued results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


def ok(*games):
    return FetchResult(games=list(games), status_code=200)


def failure(status=503):
    error = TransportError(f"unexpected HTTP status {status}", status_code=status)
    return FetchResult(error=error, status_code=status)


@pytest.fixture
def reference():
    return ReferenceData(
        team_divisions={
            "Vienna Vikings": "EAST",
            "Prague Lions": "EAST",
            "Stuttgart Surge": "WEST",
            "Paris Musketeers": "WEST",
            "Rhein Fire": "NORTH",
            "Munich Ravens": "SOUTH",
        },
        team_codes={"fevv2511": "Vienna Vikings"},
    )


@pytest.fixture
def memory_store():
    return MemorySnapshotStore()


@pytest.fixture
def sql_store():
    store = SqlSnapshotStore(DatabaseManager("sqlite:///:memory:"))
    yield store
    store.close()
