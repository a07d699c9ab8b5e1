"""
Snapshot stores: the one shared, mutable piece of state.

Writers always swap the whole game set. Both implementations serialize
writers and readers on a lock so a reader sees either the previous set or
the new one in full, whatever the database isolation level is.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from .db import DatabaseManager, ScheduleRow
from .errors import StoreError
from .models import GameRecord

logger = logging.getLogger(__name__)


def _dedupe(records: Iterable[GameRecord]) -> List[GameRecord]:
    """One record per game id, last one wins."""
    by_id = {}
    for record in records:
        by_id[record.game_id] = record
    return list(by_id.values())


class SnapshotStore(ABC):
    @abstractmethod
    def replace_all(self, records: Iterable[GameRecord]) -> int:
        """Swap in ``records`` as the complete snapshot; returns the stored count."""

    @abstractmethod
    def read_all(self) -> List[GameRecord]:
        """Current snapshot ordered by date, then time."""

    def count(self) -> int:
        return len(self.read_all())

    def is_empty(self) -> bool:
        return self.count() == 0

    def close(self) -> None:
        pass


class MemorySnapshotStore(SnapshotStore):
    def __init__(self, records: Iterable[GameRecord] = ()):
        self._lock = threading.Lock()
        self._games: Tuple[GameRecord, ...] = ()
        self.replace_all(records)

    def replace_all(self, records: Iterable[GameRecord]) -> int:
        games = tuple(sorted(_dedupe(records), key=lambda game: game.sort_key))
        with self._lock:
            self._games = games
        return len(games)

    def read_all(self) -> List[GameRecord]:
        with self._lock:
            games = self._games
        return list(games)

    def count(self) -> int:
        with self._lock:
            return len(self._games)


class SqlSnapshotStore(SnapshotStore):
    """Durable store backed by the ``schedule`` table."""

    def __init__(self, database: DatabaseManager):
        self.database = database
        self.database.init()
        self._lock = threading.RLock()

    @classmethod
    def from_url(cls, database_url: str) -> "SqlSnapshotStore":
        return cls(DatabaseManager(database_url))

    def replace_all(self, records: Iterable[GameRecord]) -> int:
        games = _dedupe(records)
        with self._lock:
            try:
                # delete and insert commit together or not at all
                with self.database.session() as session:
                    session.execute(delete(ScheduleRow))
                    session.add_all(self._to_row(game) for game in games)
            except SQLAlchemyError as exc:
                logger.exception("Replacing schedule snapshot failed; previous snapshot kept")
                raise StoreError(f"replace failed: {exc}") from exc
        logger.info("Stored %d schedule entries", len(games))
        return len(games)

    def read_all(self) -> List[GameRecord]:
        stmt = select(ScheduleRow).order_by(ScheduleRow.date, ScheduleRow.time, ScheduleRow.statcrew_id)
        with self._lock:
            try:
                with self.database.session() as session:
                    rows = session.execute(stmt).scalars().all()
                    return [self._to_record(row) for row in rows]
            except SQLAlchemyError as exc:
                logger.exception("Reading schedule snapshot failed")
                raise StoreError(f"read failed: {exc}") from exc

    def count(self) -> int:
        with self._lock:
            try:
                with self.database.session() as session:
                    return session.execute(select(func.count()).select_from(ScheduleRow)).scalar_one()
            except SQLAlchemyError as exc:
                raise StoreError(f"count failed: {exc}") from exc

    def close(self) -> None:
        self.database.dispose()

    @staticmethod
    def _to_row(game: GameRecord) -> ScheduleRow:
        return ScheduleRow(
            statcrew_id=game.game_id,
            home_team=game.home_team,
            away_team=game.away_team,
            date=game.date,
            time=game.time,
            game_week=game.week,
            location=game.location,
            home_score=game.home_score,
            away_score=game.away_score,
            slug=game.slug,
            game_date=game.game_date,
        )

    @staticmethod
    def _to_record(row: ScheduleRow) -> GameRecord:
        return GameRecord(
            game_id=row.statcrew_id,
            home_team=row.home_team,
            away_team=row.away_team,
            date=row.date,
            time=row.time,
            week=row.game_week,
            location=row.location,
            home_score=row.home_score,
            away_score=row.away_score,
            slug=row.slug,
            game_date=row.game_date,
        )
