import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .errors import StoreError
from .feed_client import FeedClient, FetchResult
from .models import GameRecord
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Keeps the snapshot store in step with the remote schedule.

    Refreshes run on a startup timer, on a fixed interval and on demand.
    Fetches may overlap; commits do not. Every refresh takes a generation
    number when it starts, and a refresh that finishes after a newer one has
    already been committed drops its games instead of writing older data.
    """

    def __init__(
        self,
        feed: FeedClient,
        store: SnapshotStore,
        interval: float = 300.0,
        startup_delay: float = 2.0,
        fallback_games: Optional[List[GameRecord]] = None,
        auto_seed: bool = True,
    ):
        self.feed = feed
        self.store = store
        self.interval = interval
        self.startup_delay = startup_delay
        self.fallback_games = list(fallback_games or [])
        self.auto_seed = auto_seed

        self.last_update: Optional[datetime] = None
        self.last_error: Optional[Dict] = None
        self.using_fallback = False

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._commit_lock = threading.Lock()
        self._generation = 0
        self._committed_generation = 0

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="schedule-sync", daemon=True)
        self._thread.start()
        logger.info("Schedule sync started (every %ss, first run in %ss)", self.interval, self.startup_delay)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Schedule sync stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self):
        if self._stop.wait(self.startup_delay):
            return

        self._safe_refresh()
        if self.auto_seed and self.fallback_games:
            self._seed_if_empty()

        while not self._stop.wait(self.interval):
            self._safe_refresh()

    # ------------------------------------------------------------------ #
    # Refreshing
    # ------------------------------------------------------------------ #
    def trigger(self) -> threading.Thread:
        """Start a refresh in the background and return without waiting."""
        thread = threading.Thread(target=self._safe_refresh, name="schedule-refresh", daemon=True)
        thread.start()
        return thread

    def refresh_now(self) -> FetchResult:
        """Fetch once and commit the games. Raises StoreError if the commit fails."""
        generation = self._next_generation()
        logger.info("Fetching new data (refresh #%d)...", generation)
        result = self.feed.fetch()

        if not result.ok:
            self.last_error = result.error.as_dict()
            logger.warning("Refresh #%d failed, keeping previous snapshot: %s", generation, result.error)
            return result

        with self._commit_lock:
            if generation < self._committed_generation:
                logger.info(
                    "Refresh #%d superseded by refresh #%d, discarding %d games",
                    generation,
                    self._committed_generation,
                    len(result.games),
                )
                return result

            self.store.replace_all(result.games)
            self._committed_generation = generation
            self.using_fallback = False
            self.last_update = datetime.now(timezone.utc)
            self.last_error = None

        logger.info("Refresh #%d stored %d games", generation, len(result.games))
        return result

    def _safe_refresh(self) -> Optional[FetchResult]:
        try:
            return self.refresh_now()
        except StoreError as exc:
            self.last_error = {"kind": "store", "message": str(exc)}
            logger.error("Refresh could not be stored: %s", exc)
        except Exception as exc:
            self.last_error = {"kind": "unexpected", "message": str(exc)}
            logger.exception("Unexpected error during refresh: %s", exc)
        return None

    def _next_generation(self) -> int:
        with self._commit_lock:
            self._generation += 1
            return self._generation

    # ------------------------------------------------------------------ #
    # Fallback data
    # ------------------------------------------------------------------ #
    def seed_fallback(self) -> int:
        """Replace the snapshot with the demo schedule.

        An explicit seed counts as a commit, so refreshes that started before
        it are superseded like any other stale refresh.
        """
        if not self.fallback_games:
            logger.warning("No fallback games configured")
            return 0

        generation = self._next_generation()
        with self._commit_lock:
            count = self._install_fallback()
            self._committed_generation = generation

        logger.info("Mock data inserted successfully (%d demo games)", count)
        return count

    def _seed_if_empty(self) -> int:
        # Checked and seeded under the commit lock. The committed generation is
        # left alone so refreshes already in flight still commit over it.
        try:
            with self._commit_lock:
                if not self.store.is_empty():
                    return 0
                logger.info("No data fetched from the schedule API, inserting mock data...")
                count = self._install_fallback()
        except StoreError as exc:
            self.last_error = {"kind": "store", "message": str(exc)}
            logger.error("Could not seed fallback data: %s", exc)
            return 0

        logger.info("Mock data inserted successfully (%d demo games)", count)
        return count

    def _install_fallback(self) -> int:
        count = self.store.replace_all(self.fallback_games)
        self.using_fallback = True
        self.last_update = datetime.now(timezone.utc)
        return count

    def status(self) -> Dict:
        return {
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "last_error": self.last_error,
            "using_fallback": self.using_fallback,
            "running": self.running,
        }
