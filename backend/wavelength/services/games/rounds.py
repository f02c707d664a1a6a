import random

from flask import current_app

from wavelength import db
from wavelength.models import GameSession, Player, Round, RoundScore, Vote
from wavelength.services import pairs as pair_store
from . import scoring


AWAITING_VOTES = 'awaiting_votes'
ALL_VOTED = 'all_voted'
REVEALED = 'revealed'

DEFAULT_PAIR = ('Hot', 'Cold')


class RoundStateError(Exception):
    """Raised when an action does not fit the session's current stage."""


def _config_int(key, default):
    try:
        return int(current_app.config.get(key, default))
    except (TypeError, ValueError):
        return default


def current_scale() -> scoring.Scale:
    return scoring.Scale(_config_int('SCALE_SIZE', 40))


def random_goal_zone(scale: scoring.Scale, width: int, rng=random) -> scoring.GoalZone:
    """Place a zone of ``width`` positions uniformly at random on the scale.

    The start is drawn from ``[0, size - width)``, so the zone never covers
    the final position.
    """
    max_start = scale.size - width
    if max_start < 1:
        raise ValueError(f'Scale of {scale.size} is too small for a goal zone of width {width}')
    return scale.zone(rng.randrange(max_start), width)


def choose_psychic(player_ids, previous=None, rng=random):
    """Pick the next clue giver, never the previous one when there is a choice."""
    player_ids = list(player_ids)
    if not player_ids:
        return None
    candidates = [pid for pid in player_ids if pid != previous] or player_ids
    return rng.choice(candidates)


def stage_for(player_ids, voted_ids) -> str:
    return ALL_VOTED if set(player_ids) <= set(voted_ids) else AWAITING_VOTES


def start_session(session: GameSession, first_psychic_id=None, rng=random) -> Round:
    """Move a lobby session into play and open round 1."""
    if session.status != 'lobby':
        raise RoundStateError('Session is not in the lobby')
    min_players = _config_int('MIN_PLAYERS', 2)
    if len(session.players) < min_players:
        raise RoundStateError(f'At least {min_players} players are required to start')
    if first_psychic_id is not None and session.player_by_id(first_psychic_id) is None:
        raise ValueError(f'Unknown player {first_psychic_id}')

    session.status = 'in_progress'
    current_app.logger.info(f"[session-start] session={session.code} players={len(session.players)}")
    return start_round(session, psychic_id=first_psychic_id, rng=rng)


def start_round(session: GameSession, psychic_id=None, rng=random) -> Round:
    """Open the next round: fresh goal zone, fresh pair, no votes.

    Cumulative scores live on the players and are left untouched.
    """
    if session.status != 'in_progress':
        raise RoundStateError('Session has not started')
    current = session.active_round
    if current is not None and current.stage != REVEALED:
        raise RoundStateError('The current round has not been revealed yet')

    zone = random_goal_zone(current_scale(), _config_int('GOAL_ZONE_WIDTH', 5), rng)
    if psychic_id is None:
        psychic_id = choose_psychic([p.id for p in session.players], session.psychic_id, rng)
    pair = pair_store.random_pair(rng)
    positive, negative = (pair.term_0, pair.term_1) if pair else DEFAULT_PAIR

    number = (session.current_round or 0) + 1
    rnd = Round(
        session_id=session.id,
        number=number,
        goal_start=zone.start,
        goal_end=zone.end,
        stage=AWAITING_VOTES,
        psychic_id=psychic_id,
        pair_id=pair.id if pair else None,
        positive=positive,
        negative=negative,
    )
    session.current_round = number
    session.psychic_id = psychic_id
    db.session.add(rnd)
    db.session.add(session)
    db.session.commit()
    current_app.logger.info(
        f"[round-start] session={session.code} round={number} psychic={psychic_id} zone={zone.start}..{zone.end}"
    )
    return rnd


def record_vote(session: GameSession, player: Player, position) -> Round:
    """Place or move ``player``'s marker for the current round."""
    rnd = session.active_round
    if session.status != 'in_progress' or rnd is None:
        raise RoundStateError('No round in progress')
    if rnd.stage == REVEALED:
        raise RoundStateError('Votes are locked once the round is revealed')
    position = current_scale().check_position(position)

    vote = Vote.query.filter_by(round_id=rnd.id, player_id=player.id).first()
    if vote:
        vote.position = position
    else:
        vote = Vote(round_id=rnd.id, player_id=player.id, position=position)
    db.session.add(vote)
    db.session.flush()

    voted_ids = {v.player_id for v in Vote.query.filter_by(round_id=rnd.id).all()}
    rnd.stage = stage_for((p.id for p in session.players), voted_ids)
    db.session.add(rnd)
    db.session.commit()
    current_app.logger.info(
        f"[vote] session={session.code} round={rnd.number} player={player.id} position={position} stage={rnd.stage}"
    )
    return rnd


def reveal_round(session: GameSession):
    """Score the current round and fold the points into running totals."""
    rnd = session.active_round
    if rnd is None:
        raise RoundStateError('No round in progress')
    if rnd.stage == REVEALED:
        raise RoundStateError('Round has already been revealed')

    players = list(session.players)
    votes = scoring.collect_votes(scoring.Vote(v.player_id, v.position) for v in rnd.votes)
    missing = [p.name for p in players if p.id not in votes]
    if missing:
        raise RoundStateError(f"Not everyone has voted: {', '.join(missing)}")

    zone = current_scale().check_zone(scoring.GoalZone(rnd.goal_start, rnd.goal_end))

    # Only one reveal may flip the stage; a concurrent one sees zero rows
    claimed = (
        Round.query
        .filter(Round.id == rnd.id, Round.stage != REVEALED)
        .update({'stage': REVEALED}, synchronize_session=False)
    )
    if not claimed:
        db.session.rollback()
        raise RoundStateError('Round has already been revealed')

    results = scoring.apply_round(
        [p.id for p in players],
        votes,
        zone,
        {p.id: p.score or 0 for p in players},
    )
    by_id = {p.id: p for p in players}
    for result in results:
        player = by_id[result.player]
        player.score = result.new_total
        db.session.add(player)
        db.session.add(RoundScore(
            round_id=rnd.id,
            player_id=result.player,
            round_points=result.round_points,
            new_total=result.new_total,
        ))
    rnd.stage = REVEALED
    db.session.add(rnd)
    db.session.commit()
    current_app.logger.info(
        f"[reveal] session={session.code} round={rnd.number} points="
        + ','.join(f"{r.player}:{r.round_points}" for r in results)
    )
    return results


def restart_session(session: GameSession) -> None:
    """Back to the lobby with every total at zero and no round history."""
    for rnd in list(session.rounds):
        db.session.delete(rnd)
    for player in session.players:
        player.score = 0
        db.session.add(player)
    session.status = 'lobby'
    session.current_round = None
    session.psychic_id = None
    db.session.add(session)
    db.session.commit()
    current_app.logger.info(f"[restart] session={session.code}")


def _zone_details(rnd: Round) -> dict:
    zone = scoring.GoalZone(rnd.goal_start, rnd.goal_end)
    table = scoring.points_by_position(current_scale(), zone)
    return {
        'goal_zone': zone.to_dict(),
        'points_by_position': [points for _, points in sorted(table.items())],
    }


def psychic_view(session: GameSession, player_id) -> dict:
    """The hidden goal zone of the current round, for its psychic only."""
    rnd = session.active_round
    if rnd is None:
        raise RoundStateError('No round in progress')
    if player_id != rnd.psychic_id:
        raise PermissionError('Only the psychic may see the goal zone before the reveal')
    view = rnd.to_dict()
    view.update(_zone_details(rnd))
    return view


def round_summary(rnd: Round) -> dict:
    """Standings for a revealed round, highest total first."""
    players = list(rnd.session.players)
    names = {p.id: p.name for p in players}
    stored = {s.player_id: s for s in rnd.scores}
    results = [
        scoring.RoundResult(p.id, stored[p.id].round_points, stored[p.id].new_total)
        for p in players if p.id in stored
    ]
    standings = []
    for rank, result in enumerate(scoring.rank_results(results), start=1):
        row = result.to_dict()
        row['name'] = names.get(result.player)
        row['rank'] = rank
        standings.append(row)

    summary = rnd.to_dict()
    summary['standings'] = standings
    if rnd.stage == REVEALED:
        summary.update(_zone_details(rnd))
    return summary


def round_history(session: GameSession):
    return [round_summary(r) for r in session.rounds if r.stage == REVEALED]
