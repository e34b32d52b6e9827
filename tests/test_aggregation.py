"""Tests for team totals."""

from scorekeeper.services import AggregationService, compute_team_totals

from factories import AWAY, GAME_ID, HOME, live_session, stat


def test_two_players_on_same_team_sum_points():
    ledgers = [
        stat("h1", HOME, [3, 3, 2, 2]),
        stat("h2", HOME, [3, 3, 3, 3, 3]),
    ]

    totals = compute_team_totals(HOME, GAME_ID, ledgers)

    assert totals.points == 25
    assert totals.threes_made == 7
    assert totals.twos_made == 2
    assert totals.team_id == HOME
    assert totals.game_id == GAME_ID


def test_records_from_other_games_are_excluded():
    ledgers = [
        stat("h1", HOME, [2, 2]),
        stat("h1", HOME, [3, 3, 3], game_id="g0", rebounds=9),
    ]

    totals = compute_team_totals(HOME, GAME_ID, ledgers)

    assert totals.points == 4
    assert totals.rebounds == 0


def test_other_team_is_excluded():
    ledgers = [
        stat("h1", HOME, [2], assists=2),
        stat("a1", AWAY, [3, 3], assists=4),
    ]

    home = compute_team_totals(HOME, GAME_ID, ledgers)
    away = compute_team_totals(AWAY, GAME_ID, ledgers)

    assert (home.points, home.assists) == (2, 2)
    assert (away.points, away.assists) == (6, 4)


def test_player_is_never_counted_twice():
    ledgers = [stat("h1", HOME, [3]), stat("h1", HOME, [3, 2])]

    assert compute_team_totals(HOME, GAME_ID, ledgers).points == 5


def test_empty_team_totals_are_zero():
    totals = compute_team_totals(AWAY, GAME_ID, [])
    assert totals.to_dict() == {
        "team_id": AWAY, "game_id": GAME_ID, "points": 0, "twos_made": 0,
        "threes_made": 0, "free_throws_made": 0, "rebounds": 0, "assists": 0,
        "blocks": 0, "steals": 0, "fouls": 0,
    }


def test_refresh_scores_sets_session_score():
    session = live_session()
    session.ledgers["h1"] = stat("h1", HOME, [3, 2])
    session.ledgers["a1"] = stat("a1", AWAY, [1])
    aggregation = AggregationService(session)

    scores = aggregation.refresh_scores()

    assert scores == {"home": 5, "away": 1}
    assert (session.home_score, session.away_score) == (5, 1)


def test_reconciled_scores_overwrite_local_values():
    session = live_session()
    session.ledgers["h1"] = stat("h1", HOME, [3])
    aggregation = AggregationService(session)
    aggregation.refresh_scores()

    aggregation.apply_reconciled_scores({"home": 52, "away": 48})

    assert (session.home_score, session.away_score) == (52, 48)
