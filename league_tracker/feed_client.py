import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from .config import SCHEDULE_REFERER, SCHEDULE_URL
from .errors import DecodeError, EmptyResponse, FeedError, TransportError
from .models import GameRecord

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    games: List[GameRecord] = field(default_factory=list)
    error: Optional[FeedError] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FeedClient:
    """Pulls the league schedule and decodes it into GameRecords.

    ``fetch`` makes exactly one request and never raises for feed problems;
    the failure comes back on the result so the caller can keep its
    previous snapshot.
    """

    PREVIEW_CHARS = 500

    def __init__(
        self,
        url: str = SCHEDULE_URL,
        referer: str = SCHEDULE_REFERER,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.referer = referer
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> "FeedClient":
        return cls(
            url=settings.schedule_url,
            referer=settings.schedule_referer,
            timeout=settings.fetch_timeout,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def fetch(self) -> FetchResult:
        try:
            response = self.session.get(self.url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Schedule request to %s failed: %s", self.url, exc)
            return FetchResult(error=TransportError(f"request failed: {exc}"))

        status = response.status_code
        logger.info("Schedule API HTTP status: %d", status)

        if status != 200:
            logger.warning("Schedule API returned HTTP %d - API may be temporarily unavailable", status)
            return FetchResult(
                error=TransportError(f"unexpected HTTP status {status}", status_code=status),
                status_code=status,
            )

        body = response.text or ""
        if not body.strip():
            logger.warning("Schedule API returned empty response")
            return FetchResult(error=EmptyResponse("schedule response body was empty"), status_code=status)

        logger.debug("Schedule API response (first %d chars): %s", self.PREVIEW_CHARS, body[: self.PREVIEW_CHARS])

        try:
            games = self.decode(body)
        except DecodeError as exc:
            logger.warning("Error parsing schedule JSON: %s", exc)
            return FetchResult(error=exc, status_code=status)

        logger.info("Fetched %d schedule entries", len(games))
        return FetchResult(games=games, status_code=status)

    # ------------------------------------------------------------------ #
    # Decoding
    # ------------------------------------------------------------------ #
    @staticmethod
    def decode(body: str) -> List[GameRecord]:
        """Decode a schedule payload. Duplicate ids keep the last entry."""
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise DecodeError(f"malformed JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise DecodeError(f"expected a JSON array, got {type(payload).__name__}")

        games: Dict[str, GameRecord] = {}
        for index, raw in enumerate(payload):
            try:
                game = GameRecord.from_feed(raw)
            except ValueError as exc:
                raise DecodeError(f"game #{index}: {exc}") from exc
            games.pop(game.game_id, None)
            games[game.game_id] = game

        return list(games.values())

    def _headers(self) -> Dict[str, str]:
        return {"Referer": self.referer, "Accept": "application/json"}
