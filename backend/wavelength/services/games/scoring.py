"""Round scoring for the wavelength game.

Everything here is pure: no database, no Flask. Routes and the round
lifecycle hand in plain values and persist whatever comes back.

A vote scores by its distance from the goal zone's center:

    distance 0 -> 3 points (bullseye)
    distance 1 -> 2 points
    distance 2 -> 1 point

Votes outside the zone score nothing. The table assumes the fixed zone
width of 5; a wider zone still only pays out within two of the center.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Mapping, Optional


POINTS_BY_DISTANCE = {0: 3, 1: 2, 2: 1}


@dataclass(frozen=True)
class Scale:
    """Discrete positions ``0..size-1`` a vote can land on."""

    size: int = 40

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f'Scale size must be positive, got {self.size}')

    @property
    def last(self) -> int:
        return self.size - 1

    def contains(self, position: int) -> bool:
        return 0 <= position < self.size

    def check_position(self, position: int) -> int:
        if isinstance(position, bool) or not isinstance(position, int):
            raise ValueError(f'Position must be an integer, got {position!r}')
        if not self.contains(position):
            raise ValueError(f'Position {position} is outside the scale 0..{self.last}')
        return position

    def check_zone(self, zone: 'GoalZone') -> 'GoalZone':
        if zone.end > self.last:
            raise ValueError(f'Goal zone {zone.start}..{zone.end} runs past the scale end {self.last}')
        return zone

    def zone(self, start: int, width: int) -> 'GoalZone':
        """Build a goal zone of ``width`` positions beginning at ``start``."""
        if width < 1:
            raise ValueError(f'Goal zone width must be positive, got {width}')
        return self.check_zone(GoalZone(start, start + width - 1))


@dataclass(frozen=True)
class GoalZone:
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f'Goal zone start must not be negative, got {self.start}')
        if self.start > self.end:
            raise ValueError(f'Goal zone start {self.start} is after end {self.end}')

    @property
    def center(self) -> int:
        return (self.start + self.end) // 2

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def __contains__(self, position: int) -> bool:
        return self.start <= position <= self.end

    def to_dict(self):
        return {'start': self.start, 'end': self.end, 'center': self.center}


@dataclass(frozen=True)
class Vote:
    player: Hashable
    position: int


@dataclass(frozen=True)
class RoundResult:
    player: Hashable
    round_points: int
    new_total: int

    def to_dict(self):
        return {
            'player': self.player,
            'round_points': self.round_points,
            'new_total': self.new_total,
        }


def collect_votes(votes: Iterable[Vote]) -> Dict[Hashable, int]:
    """Index votes by player. A player may hold only one vote per round."""
    by_player: Dict[Hashable, int] = {}
    for vote in votes:
        if vote.player in by_player:
            raise ValueError(f'Player {vote.player!r} voted more than once')
        by_player[vote.player] = vote.position
    return by_player


def score_vote(position: int, goal_zone: GoalZone) -> int:
    if position < goal_zone.start or position > goal_zone.end:
        return 0
    distance = abs(position - goal_zone.center)
    return POINTS_BY_DISTANCE.get(distance, 0)


def apply_round(
    players: Iterable[Hashable],
    votes: Mapping[Hashable, Optional[int]],
    goal_zone: GoalZone,
    prior_totals: Optional[Mapping[Hashable, int]] = None,
) -> List[RoundResult]:
    """Score one round for every player, in the order given.

    A player with no vote (missing key or ``None``) earns 0 for the round.
    Players absent from ``prior_totals`` start from 0. Neither mapping is
    modified.
    """
    prior_totals = prior_totals or {}
    results = []
    for player in players:
        position = votes.get(player)
        round_points = score_vote(position, goal_zone) if position is not None else 0
        results.append(RoundResult(
            player=player,
            round_points=round_points,
            new_total=prior_totals.get(player, 0) + round_points,
        ))
    return results


def rank_results(results: Iterable[RoundResult]) -> List[RoundResult]:
    """Highest total first; ties keep their input order."""
    return sorted(results, key=lambda r: r.new_total, reverse=True)


def points_by_position(scale: Scale, goal_zone: GoalZone) -> Dict[int, int]:
    """Point value of every position on the scale, for the reveal screen."""
    return {position: score_vote(position, goal_zone) for position in range(scale.size)}
