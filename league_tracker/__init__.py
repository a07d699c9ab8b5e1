"""
Core of the league tracker.

This package holds the schedule sync and standings logic so the Flask app
and the one-shot fetch script share the same feed client, store and
standings rules.
"""

from .feed_client import FeedClient, FetchResult
from .models import DivisionStandings, GameRecord, Standing, TeamTally
from .scheduler import SyncScheduler
from .service import LeagueService
from .standings import StandingsAggregator
from .store import MemorySnapshotStore, SnapshotStore, SqlSnapshotStore

__all__ = [
    "DivisionStandings",
    "FeedClient",
    "FetchResult",
    "GameRecord",
    "LeagueService",
    "MemorySnapshotStore",
    "SnapshotStore",
    "SqlSnapshotStore",
    "Standing",
    "StandingsAggregator",
    "SyncScheduler",
    "TeamTally",
]
