from flask import Blueprint, jsonify, request
from flask_login import current_user
from wavelength.services import pairs as pair_store
from wavelength.services.pairs import PairError


pairs = Blueprint('pairs', __name__)


def _owner_id():
    return current_user.id if current_user.is_authenticated else None


@pairs.errorhandler(PairError)
def handle_pair_error(exc):
    return jsonify({'error': str(exc)}), exc.status_code


@pairs.errorhandler(ValueError)
def handle_value_error(exc):
    return jsonify({'error': str(exc)}), 400


@pairs.route('/', methods=['GET'])
def list_pairs():
    kind = request.args.get('kind', 'all')
    return jsonify([p.to_dict() for p in pair_store.list_pairs(kind)])


@pairs.route('/mine', methods=['GET'])
def my_pairs():
    owner_id = _owner_id()
    return jsonify({
        'pairs': [p.to_dict() for p in pair_store.owned_pairs(owner_id)],
        'limit': pair_store.pair_limit(owner_id),
    })


@pairs.route('/random', methods=['GET'])
def random_pair():
    kind = request.args.get('kind', 'all')
    count = request.args.get('count', type=int)
    if count is not None:
        picked = pair_store.random_pairs(count, kind=kind)
        return jsonify([{'positive': p.term_0, 'negative': p.term_1} for p in picked])
    pair = pair_store.random_pair(kind=kind)
    if pair is None:
        return jsonify({'error': 'No pairs available'}), 404
    return jsonify({'positive': pair.term_0, 'negative': pair.term_1})


@pairs.route('/count', methods=['GET'])
def count_pairs():
    return jsonify(pair_store.pair_counts())


@pairs.route('/', methods=['POST'])
def create_pair():
    data = request.get_json(silent=True) or {}
    pair = pair_store.create_custom_pair(data.get('term_0'), data.get('term_1'), owner_id=_owner_id())
    return jsonify(pair.to_dict()), 201


@pairs.route('/<int:pair_id>', methods=['PUT'])
def update_pair(pair_id):
    data = request.get_json(silent=True) or {}
    pair = pair_store.update_custom_pair(pair_id, data.get('term_0'), data.get('term_1'), owner_id=_owner_id())
    return jsonify(pair.to_dict())


@pairs.route('/<int:pair_id>', methods=['DELETE'])
def delete_pair(pair_id):
    pair_store.delete_custom_pair(pair_id, owner_id=_owner_id())
    return jsonify({'success': True})
