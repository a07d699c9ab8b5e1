"""
Static league data: division membership, team codes and the demo schedule.

Both datasets live in JSON files so a league realignment only needs a data
change. The bundled copies under ``league_tracker/data`` are used unless a
path is configured.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import ReferenceDataError
from .models import GameRecord

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_REFERENCE_PATH = DATA_DIR / "reference.json"
DEFAULT_FALLBACK_PATH = DATA_DIR / "fallback_games.json"

UNKNOWN_DIVISION = "UNKNOWN"
DEFAULT_DIVISION_ORDER = ("EAST", "WEST", "NORTH", "SOUTH")

PathLike = Union[str, Path]


@dataclass
class ReferenceData:
    team_divisions: Dict[str, str] = field(default_factory=dict)
    team_codes: Dict[str, str] = field(default_factory=dict)
    division_order: List[str] = field(default_factory=lambda: list(DEFAULT_DIVISION_ORDER))

    def division_for(self, team_name: str) -> str:
        return self.team_divisions.get(team_name) or UNKNOWN_DIVISION

    def team_name(self, code: str) -> str:
        """Display name for a statcrew team code, or the code itself."""
        return self.team_codes.get(code, code)

    def output_order(self) -> List[str]:
        """Canonical divisions followed by the catch-all group."""
        order = list(self.division_order)
        if UNKNOWN_DIVISION not in order:
            order.append(UNKNOWN_DIVISION)
        return order

    @classmethod
    def from_dict(cls, payload: Dict) -> "ReferenceData":
        if not isinstance(payload, dict):
            raise ReferenceDataError("reference data must be a JSON object")

        divisions = payload.get("divisions", {})
        if not isinstance(divisions, dict):
            raise ReferenceDataError("'divisions' must map a division to a list of teams")

        team_divisions: Dict[str, str] = {}
        for division, teams in divisions.items():
            if not isinstance(teams, list):
                raise ReferenceDataError(f"division {division!r} must list team names")
            for team in teams:
                previous = team_divisions.get(team)
                if previous and previous != division:
                    raise ReferenceDataError(
                        f"team {team!r} is listed in both {previous} and {division}"
                    )
                team_divisions[team] = division

        team_codes = payload.get("team_codes", {})
        if not isinstance(team_codes, dict):
            raise ReferenceDataError("'team_codes' must be an object")

        order = payload.get("division_order") or list(divisions) or list(DEFAULT_DIVISION_ORDER)
        if not isinstance(order, list):
            raise ReferenceDataError("'division_order' must be a list")
        missing = sorted(set(team_divisions.values()) - set(order))
        if missing:
            raise ReferenceDataError(f"divisions missing from division_order: {missing}")

        return cls(team_divisions=team_divisions, team_codes=dict(team_codes), division_order=list(order))


def _read_json(path: PathLike):
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        raise ReferenceDataError(f"cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"invalid JSON in {path}: {exc}") from exc


def load_reference_data(path: Optional[PathLike] = None) -> ReferenceData:
    path = path or DEFAULT_REFERENCE_PATH
    reference = ReferenceData.from_dict(_read_json(path))
    logger.info(
        "Loaded reference data from %s (%d teams, %d divisions)",
        path,
        len(reference.team_divisions),
        len(reference.division_order),
    )
    return reference


def load_fallback_games(path: Optional[PathLike] = None) -> List[GameRecord]:
    """Demo schedule used to seed an empty store. Every id must start with ``demo-``."""
    path = path or DEFAULT_FALLBACK_PATH
    payload = _read_json(path)
    if not isinstance(payload, list):
        raise ReferenceDataError(f"fallback data in {path} must be a JSON array")

    games = []
    for index, raw in enumerate(payload):
        try:
            game = GameRecord.from_feed(raw)
        except ValueError as exc:
            raise ReferenceDataError(f"fallback game #{index} in {path}: {exc}") from exc
        if not game.game_id.startswith("demo-"):
            raise ReferenceDataError(f"fallback game id {game.game_id!r} must start with 'demo-'")
        games.append(game)
    return games
