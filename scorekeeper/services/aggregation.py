"""Team totals derived from player ledgers."""

from typing import Dict, Iterable

from ..models import GameSession, PlayerGameStat, TeamGameStat


def compute_team_totals(
    team_id: str, game_id: str, ledgers: Iterable[PlayerGameStat]
) -> TeamGameStat:
    """
    Sum every numeric field of the ledgers belonging to ``team_id`` in ``game_id``.

    Records from other games or other teams are ignored. If the same player
    appears more than once, only the last record counts.
    """
    members: Dict[str, PlayerGameStat] = {}
    for stat in ledgers:
        if stat.team_id == team_id and stat.game_id == game_id:
            members[stat.player_id] = stat

    totals = TeamGameStat(team_id=team_id, game_id=game_id)
    for stat in members.values():
        totals.add(stat)
    return totals


class AggregationService:
    """Recomputes team totals and the optimistic score of record for a session."""

    def __init__(self, session: GameSession):
        self.session = session

    def team_totals(self, team_id: str) -> TeamGameStat:
        return compute_team_totals(team_id, self.session.game_id, self.session.ledgers.values())

    def all_totals(self) -> Dict[str, TeamGameStat]:
        return {team_id: self.team_totals(team_id) for team_id in self.session.team_ids}

    def refresh_scores(self) -> Dict[str, int]:
        """
        Recompute both teams' points and store them as the session score.

        Returns:
            ``{"home": int, "away": int}`` as sent to the league service
        """
        home = self.team_totals(self.session.home_team_id).points
        away = self.team_totals(self.session.away_team_id).points
        self.session.home_score = home
        self.session.away_score = away
        return {"home": home, "away": away}

    def apply_reconciled_scores(self, scores: Dict[str, int]) -> None:
        """Overwrite the score of record with the league service's values."""
        self.session.home_score = int(scores["home"])
        self.session.away_score = int(scores["away"])
