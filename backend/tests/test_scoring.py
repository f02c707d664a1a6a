"""
Testing pure round scoring.
"""

import pytest

from wavelength.services.games.scoring import (
    GoalZone,
    RoundResult,
    Scale,
    Vote,
    apply_round,
    collect_votes,
    points_by_position,
    rank_results,
    score_vote,
)


def test_score_vote_by_distance_from_center():
    zone = GoalZone(8, 12)
    assert zone.center == 10
    assert score_vote(10, zone) == 3
    assert score_vote(9, zone) == 2
    assert score_vote(11, zone) == 2
    assert score_vote(8, zone) == 1
    assert score_vote(12, zone) == 1


def test_score_vote_outside_zone_is_zero():
    zone = GoalZone(0, 4)
    assert score_vote(4, zone) == 1
    assert score_vote(5, zone) == 0
    assert score_vote(-3, zone) == 0
    assert score_vote(100, zone) == 0


def test_wide_zone_only_pays_near_center():
    zone = GoalZone(0, 8)
    assert zone.center == 4
    assert score_vote(0, zone) == 0
    assert score_vote(1, zone) == 0
    assert score_vote(2, zone) == 1


def test_even_width_zone_center_rounds_down():
    zone = GoalZone(3, 6)
    assert zone.center == 4
    assert score_vote(4, zone) == 3


def test_every_width_five_zone_has_one_bullseye_and_symmetric_points():
    scale = Scale(40)
    for start in range(scale.size - 4):
        zone = scale.zone(start, 5)
        points = [score_vote(pos, zone) for pos in range(scale.size)]
        assert set(points) <= {0, 1, 2, 3}
        assert points.count(3) == 1
        for offset in range(1, 6):
            left, right = zone.center - offset, zone.center + offset
            if scale.contains(left) and scale.contains(right):
                assert points[left] == points[right]


def test_apply_round_scenario():
    zone = GoalZone(8, 12)
    players = ['A', 'B', 'C', 'D', 'E']
    votes = {'A': 10, 'B': 9, 'C': 11, 'D': 7, 'E': 15}

    results = apply_round(players, votes, zone, {})

    assert [r.player for r in results] == players
    assert {r.player: r.round_points for r in results} == {'A': 3, 'B': 2, 'C': 2, 'D': 0, 'E': 0}


def test_apply_round_adds_to_prior_totals():
    zone = GoalZone(8, 12)
    results = apply_round(['A', 'B'], {'A': 9, 'B': 20}, zone, {'A': 5, 'B': 3})
    assert results == [RoundResult('A', 2, 7), RoundResult('B', 0, 3)]


def test_apply_round_unset_votes_and_unseen_players_score_zero():
    zone = GoalZone(8, 12)
    results = apply_round(['A', 'B', 'C'], {'A': None}, zone, {})
    assert [(r.round_points, r.new_total) for r in results] == [(0, 0), (0, 0), (0, 0)]


def test_apply_round_empty_players():
    assert apply_round([], {'A': 10}, GoalZone(8, 12), {'A': 1}) == []


def test_apply_round_is_repeatable_and_does_not_mutate_inputs():
    zone = GoalZone(8, 12)
    players = ['A', 'B']
    votes = {'A': 10, 'B': 12}
    prior = {'A': 1}

    first = apply_round(players, votes, zone, prior)
    second = apply_round(players, votes, zone, prior)

    assert first == second
    assert votes == {'A': 10, 'B': 12}
    assert prior == {'A': 1}


def test_rank_results_descending_with_stable_ties():
    results = [
        RoundResult('A', 1, 4),
        RoundResult('B', 3, 9),
        RoundResult('C', 2, 4),
        RoundResult('D', 0, 0),
    ]
    assert [r.player for r in rank_results(results)] == ['B', 'A', 'C', 'D']


def test_goal_zone_rejects_bad_bounds():
    with pytest.raises(ValueError):
        GoalZone(5, 4)
    with pytest.raises(ValueError):
        GoalZone(-1, 3)


def test_scale_validates_zone_and_position():
    scale = Scale(40)
    assert scale.zone(35, 5) == GoalZone(35, 39)
    with pytest.raises(ValueError):
        scale.zone(36, 5)
    with pytest.raises(ValueError):
        scale.zone(0, 0)
    assert scale.check_position(0) == 0
    assert scale.check_position(39) == 39
    for bad in (-1, 40, '3', 2.5, True):
        with pytest.raises(ValueError):
            scale.check_position(bad)
    with pytest.raises(ValueError):
        Scale(0)


def test_collect_votes_rejects_second_vote():
    assert collect_votes([Vote('A', 3), Vote('B', 4)]) == {'A': 3, 'B': 4}
    with pytest.raises(ValueError):
        collect_votes([Vote('A', 3), Vote('A', 4)])


def test_points_by_position_covers_scale():
    table = points_by_position(Scale(10), GoalZone(0, 4))
    assert [table[i] for i in range(10)] == [1, 2, 3, 2, 1, 0, 0, 0, 0, 0]
