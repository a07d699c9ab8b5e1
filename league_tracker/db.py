import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import DateTime, Integer, String, create_engine, event, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class ScheduleRow(Base):
    """One cached game, keyed by the feed's statcrew id."""

    __tablename__ = "schedule"

    statcrew_id: Mapped[str] = mapped_column(String, primary_key=True)
    home_team: Mapped[str] = mapped_column(String, nullable=False, default="")
    away_team: Mapped[str] = mapped_column(String, nullable=False, default="")
    date: Mapped[str] = mapped_column(String, nullable=False, default="", index=True)
    time: Mapped[str] = mapped_column(String, nullable=False, default="")
    game_week: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    location: Mapped[str] = mapped_column(String, nullable=False, default="")
    home_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    slug: Mapped[str] = mapped_column(String, nullable=False, default="")
    game_date: Mapped[str] = mapped_column(String, nullable=False, default="")
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, server_default=func.current_timestamp())


class DatabaseManager:
    """Owns the engine and session factory for the schedule cache."""

    def __init__(self, database_url: str):
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    def init(self) -> None:
        if self._engine is not None:
            return

        logger.info("Initializing database engine for %s", self._database_url)
        kwargs = {}
        if self._database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if self._database_url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every checkout gets a fresh empty database
                kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self._database_url, **kwargs)

        if self._database_url.startswith("sqlite"):

            @event.listens_for(self._engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                except Exception:
                    logger.debug("SQLite WAL journal_mode not applied")
                finally:
                    cursor.close()

        Base.metadata.create_all(self._engine)
        self._sessionmaker = sessionmaker(self._engine, expire_on_commit=False)
        logger.info("Database tables created successfully")

    def dispose(self) -> None:
        if self._engine is not None:
            logger.info("Disposing database engine")
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session; commit on success, roll back on any error."""
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")

        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine
