import logging
from typing import Dict, List, Optional

from .config import Settings
from .feed_client import FeedClient
from .models import DivisionStandings, GameRecord
from .reference import ReferenceData, load_fallback_games, load_reference_data
from .scheduler import SyncScheduler
from .standings import StandingsAggregator
from .store import SnapshotStore, SqlSnapshotStore

logger = logging.getLogger(__name__)


class LeagueService:
    """Read and refresh operations used by the web app and the CLI."""

    def __init__(self, store: SnapshotStore, scheduler: SyncScheduler, reference: ReferenceData):
        self.store = store
        self.scheduler = scheduler
        self.reference = reference
        self.aggregator = StandingsAggregator(reference)

    @classmethod
    def from_settings(cls, settings: Settings, store: Optional[SnapshotStore] = None) -> "LeagueService":
        reference = load_reference_data(settings.reference_data_path)
        fallback = load_fallback_games(settings.fallback_data_path)
        store = store or SqlSnapshotStore.from_url(settings.database_url)
        scheduler = SyncScheduler(
            feed=FeedClient.from_settings(settings),
            store=store,
            interval=settings.refresh_interval,
            startup_delay=settings.startup_delay,
            fallback_games=fallback,
            auto_seed=settings.seed_fallback,
        )
        return cls(store, scheduler, reference)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def get_snapshot(self) -> List[GameRecord]:
        return self.store.read_all()

    def get_standings(self) -> List[DivisionStandings]:
        return self.aggregator.compute(self.store.read_all())

    def trigger_refresh(self) -> Dict:
        self.scheduler.trigger()
        return {"message": "Data refresh initiated"}

    def seed_fallback(self) -> Dict:
        self.scheduler.seed_fallback()
        return {"message": "Mock data inserted successfully"}

    def team_name(self, code: str) -> str:
        return self.reference.team_name(code)

    def status(self) -> Dict:
        status = self.scheduler.status()
        status["games"] = self.store.count()
        return status

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop(timeout=5)
