"""
Division standings derived from the cached schedule.

Only played games count. The higher score wins; a game with equal nonzero
scores is kept for strength-of-schedule purposes but adds neither a win nor
a loss. Everything here is a pure function of the games and reference data.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import DivisionStandings, GameRecord, Standing, TeamTally
from .reference import ReferenceData

logger = logging.getLogger(__name__)


def played_games(games: Iterable[GameRecord]) -> List[GameRecord]:
    return [game for game in games if game.played]


def winner_and_loser(game: GameRecord) -> Optional[Tuple[str, str]]:
    if game.home_score > game.away_score:
        return game.home_team, game.away_team
    if game.away_score > game.home_score:
        return game.away_team, game.home_team
    return None


def tally_records(games: Iterable[GameRecord]) -> Dict[str, TeamTally]:
    """Wins and losses per team, in first-seen order. Ties add no tally."""
    tallies: Dict[str, TeamTally] = {}
    for game in games:
        result = winner_and_loser(game)
        if result is None:
            continue
        winner, loser = result
        tallies.setdefault(winner, TeamTally(winner)).wins += 1
        tallies.setdefault(loser, TeamTally(loser)).losses += 1
    return tallies


def _ratio(wins: int, games: int) -> float:
    return wins / games if games > 0 else 0.0


def strength_metrics(team: str, games: Iterable[GameRecord], tallies: Dict[str, TeamTally]) -> Tuple[float, float]:
    """Return (strength of schedule, strength of victory) for ``team``.

    SoS sums the opponents' wins over their games for every game the team
    played; SoV does the same over the games the team won.
    """
    opponent_wins = opponent_games = 0
    beaten_wins = beaten_games = 0

    for game in games:
        if game.home_team == team:
            opponent = game.away_team
            won = game.home_score > game.away_score
        elif game.away_team == team:
            opponent = game.home_team
            won = game.away_score > game.home_score
        else:
            continue

        tally = tallies.get(opponent)
        if tally is None:
            continue
        opponent_wins += tally.wins
        opponent_games += tally.games
        if won:
            beaten_wins += tally.wins
            beaten_games += tally.games

    return _ratio(opponent_wins, opponent_games), _ratio(beaten_wins, beaten_games)


class StandingsAggregator:
    def __init__(self, reference: ReferenceData):
        self.reference = reference

    def compute(self, games: Iterable[GameRecord]) -> List[DivisionStandings]:
        played = played_games(games)
        tallies = tally_records(played)

        by_division: Dict[str, List[Standing]] = {}
        for team, tally in tallies.items():
            sos, sov = strength_metrics(team, played, tallies)
            division = self.reference.division_for(team)
            by_division.setdefault(division, []).append(
                Standing(
                    team_name=team,
                    division=division,
                    wins=tally.wins,
                    losses=tally.losses,
                    record=f"{tally.wins}-{tally.losses}",
                    sos=sos,
                    sov=sov,
                )
            )

        standings = []
        for division in self.reference.output_order():
            teams = by_division.get(division)
            if not teams:
                continue
            # sorted() is stable, so equal records keep first-seen order
            teams = sorted(teams, key=lambda s: (-s.wins, s.losses))
            for position, standing in enumerate(teams, start=1):
                standing.position = position
            standings.append(DivisionStandings(division=division, teams=teams))

        logger.debug("Calculated standings for %d teams from %d played games", len(tallies), len(played))
        return standings
