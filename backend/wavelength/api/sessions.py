from flask import Blueprint, jsonify, request, current_app
from wavelength import db
from wavelength.models import GameSession, Player
from wavelength.services.games import rounds
from wavelength.services.games.rounds import RoundStateError
from wavelength.socketio_events import broadcast_state


sessions = Blueprint('sessions', __name__)


def _get_session(code: str) -> GameSession:
    return GameSession.query.filter_by(code=code.upper()).first_or_404()


def _player_id(value):
    """Coerce a client-supplied player id; None when absent."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError(f'Invalid player id {value!r}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f'Invalid player id {value!r}')


@sessions.errorhandler(RoundStateError)
def handle_round_state_error(exc):
    return jsonify({'error': str(exc)}), 400


@sessions.errorhandler(ValueError)
def handle_value_error(exc):
    return jsonify({'error': str(exc)}), 400


@sessions.route('/create', methods=['POST'])
def create_session():
    new_session = GameSession()
    db.session.add(new_session)
    db.session.commit()
    current_app.logger.info(f"[session-create] session={new_session.code}")
    return jsonify({
        'message': 'New session created!',
        'code': new_session.code
    }), 201


@sessions.route('/join', methods=['POST'])
def join_session():
    data = request.get_json(silent=True) or {}
    code = str(data.get('code') or '').strip()
    name = str(data.get('name') or '').strip().upper()
    if not all([code, name]):
        return jsonify({'error': 'Session code and player name are required'}), 400

    game_session = GameSession.query.filter_by(code=code.upper()).first()
    if not game_session:
        return jsonify({'error': 'Session not found'}), 404

    if game_session.status != 'lobby':
        return jsonify({'error': 'This session is not in the lobby'}), 403

    if any(p.name == name for p in game_session.players):
        return jsonify({'error': f'{name} has already joined'}), 400

    max_players = int(current_app.config.get('MAX_PLAYERS', 8))
    if len(game_session.players) >= max_players:
        return jsonify({'error': f'A session holds at most {max_players} players'}), 400

    new_player = Player(name=name, session_id=game_session.id, join_order=len(game_session.players))
    db.session.add(new_player)
    db.session.commit()
    broadcast_state(game_session.code)

    return jsonify(new_player.to_dict()), 201


@sessions.route('/<string:code>/state', methods=['GET'])
def get_session_state(code):
    game_session = _get_session(code)
    payload = game_session.to_dict()
    payload['scale_size'] = rounds.current_scale().size
    return jsonify(payload)


@sessions.route('/<string:code>/start', methods=['POST'])
def start_session(code):
    data = request.get_json(silent=True) or {}
    game_session = _get_session(code)
    if game_session.status == 'in_progress':
        # Idempotent start: already started
        return jsonify(game_session.to_dict())

    rounds.start_session(game_session, first_psychic_id=_player_id(data.get('first_psychic_id')))
    broadcast_state(game_session.code)
    return jsonify(game_session.to_dict())


@sessions.route('/<string:code>/vote', methods=['POST'])
def submit_vote(code):
    data = request.get_json(silent=True) or {}
    game_session = _get_session(code)
    player_id = _player_id(data.get('player_id'))
    player = game_session.player_by_id(player_id) if player_id is not None else None
    if not player:
        return jsonify({'error': 'Invalid player'}), 400
    if 'position' not in data:
        return jsonify({'error': 'position is required'}), 400

    rounds.record_vote(game_session, player, data['position'])
    broadcast_state(game_session.code)
    return jsonify(game_session.to_dict())


@sessions.route('/<string:code>/reveal', methods=['POST'])
def reveal(code):
    game_session = _get_session(code)
    rounds.reveal_round(game_session)
    broadcast_state(game_session.code)
    return jsonify(rounds.round_summary(game_session.active_round))


@sessions.route('/<string:code>/next', methods=['POST'])
def next_round(code):
    game_session = _get_session(code)
    rounds.start_round(game_session)
    broadcast_state(game_session.code)
    return jsonify(game_session.to_dict())


@sessions.route('/<string:code>/restart', methods=['POST'])
def restart(code):
    game_session = _get_session(code)
    rounds.restart_session(game_session)
    broadcast_state(game_session.code)
    return jsonify(game_session.to_dict())


@sessions.route('/<string:code>/rounds', methods=['GET'])
def history(code):
    game_session = _get_session(code)
    return jsonify(rounds.round_history(game_session))


@sessions.route('/<string:code>/psychic', methods=['GET'])
def psychic_view(code):
    game_session = _get_session(code)
    player_id = _player_id(request.args.get('player_id'))
    try:
        view = rounds.psychic_view(game_session, player_id)
    except PermissionError as exc:
        return jsonify({'error': str(exc)}), 403
    return jsonify(view)
