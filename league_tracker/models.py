from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List


# Feed object key -> GameRecord attribute
FEED_FIELDS = {
    "statcrewID": "game_id",
    "homename": "home_team",
    "awayname": "away_team",
    "date": "date",
    "time": "time",
    "gameweek": "week",
    "Location": "location",
    "homeScore": "home_score",
    "awayScore": "away_score",
    "slug": "slug",
    "gamedate": "game_date",
}

_INT_FIELDS = ("week", "home_score", "away_score")


def _as_text(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _as_int(value: Any, key: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass; the feed never sends booleans for numbers
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got bool")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {type(value).__name__}")
    return value


@dataclass
class GameRecord:
    game_id: str
    home_team: str
    away_team: str
    date: str = ""
    time: str = ""
    week: int = 0
    location: str = ""
    home_score: int = 0
    away_score: int = 0
    slug: str = ""
    game_date: str = ""

    @property
    def played(self) -> bool:
        """A 0-0 game has not been played yet; any other score counts."""
        return self.home_score > 0 or self.away_score > 0

    @property
    def sort_key(self):
        return (self.date, self.time, self.game_id)

    @classmethod
    def from_feed(cls, raw: Dict[str, Any]) -> "GameRecord":
        """Decode one object of the remote schedule payload.

        Raises ValueError when the object is not a usable game.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"game entry must be an object, got {type(raw).__name__}")

        values: Dict[str, Any] = {}
        for feed_key, attr in FEED_FIELDS.items():
            value = raw.get(feed_key)
            if attr in _INT_FIELDS:
                values[attr] = _as_int(value, feed_key)
            else:
                values[attr] = _as_text(value, feed_key)

        values["game_id"] = values["game_id"].strip()
        if not values["game_id"]:
            raise ValueError("statcrewID is required")
        if values["home_score"] < 0 or values["away_score"] < 0:
            raise ValueError(f"negative score for game {values['game_id']}")

        return cls(**values)

    def to_feed(self) -> Dict[str, Any]:
        return {feed_key: getattr(self, attr) for feed_key, attr in FEED_FIELDS.items()}

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass
class TeamTally:
    team_name: str
    wins: int = 0
    losses: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses


@dataclass
class Standing:
    team_name: str
    division: str
    wins: int
    losses: int
    record: str
    position: int = 0
    sos: float = 0.0
    sov: float = 0.0

    def as_dict(self) -> Dict:
        return asdict(self)


@dataclass
class DivisionStandings:
    division: str
    teams: List[Standing] = field(default_factory=list)

    def as_dict(self) -> Dict:
        return {
            "division": self.division,
            "teams": [team.as_dict() for team in self.teams],
        }
