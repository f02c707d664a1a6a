"""Word pair store: the two terms labelling the ends of the scale.

Built-in pairs ship with the game; custom pairs are added by players, either
signed in (owned by their user) or anonymously (a shared pool).
"""

import random
from typing import Optional

from flask import current_app

from wavelength import db
from wavelength.models import Pair


BUILTIN_PAIRS = [
    ('Hot', 'Cold'),
    ('Overrated', 'Underrated'),
    ('Useless', 'Useful'),
    ('Scary', 'Comforting'),
    ('Cheap', 'Expensive'),
    ('Boring', 'Exciting'),
    ('Healthy', 'Unhealthy'),
    ('Normal', 'Weird'),
    ('Easy to spell', 'Hard to spell'),
    ('Bad movie', 'Good movie'),
    ('Fantasy', 'Sci-fi'),
    ('Round', 'Pointy'),
]


class PairError(Exception):
    status_code = 400


class PairNotFoundError(PairError):
    status_code = 404


class PairExistsError(PairError):
    status_code = 409


class PairPermissionError(PairError):
    status_code = 403


class PairLimitError(PairError):
    status_code = 400


def _clean_terms(term_0, term_1):
    term_0 = (term_0 or '').strip()
    term_1 = (term_1 or '').strip()
    if not term_0 or not term_1:
        raise ValueError('Both terms must be provided and cannot be empty')
    return term_0, term_1


def list_pairs(kind='all'):
    query = Pair.query
    if kind == 'builtin':
        query = query.filter_by(is_custom=False)
    elif kind == 'custom':
        query = query.filter_by(is_custom=True)
    elif kind != 'all':
        raise ValueError(f'Unknown pair kind {kind!r}')
    return query.order_by(Pair.created_at.desc(), Pair.id.desc()).all()


def owned_pairs(owner_id: Optional[int]):
    """Custom pairs belonging to ``owner_id``, or to the anonymous pool for None."""
    query = Pair.query.filter_by(is_custom=True)
    if owner_id is None:
        query = query.filter(Pair.created_by.is_(None))
    else:
        query = query.filter_by(created_by=owner_id)
    return query.order_by(Pair.created_at.desc(), Pair.id.desc()).all()


def pair_exists(term_0, term_1, exclude_id=None) -> bool:
    """Case-insensitive match in either orientation."""
    t0, t1 = term_0.lower(), term_1.lower()
    lower_0, lower_1 = db.func.lower(Pair.term_0), db.func.lower(Pair.term_1)
    query = Pair.query.filter(db.or_(
        db.and_(lower_0 == t0, lower_1 == t1),
        db.and_(lower_0 == t1, lower_1 == t0),
    ))
    if exclude_id is not None:
        query = query.filter(Pair.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def can_modify_pair(pair: Pair, owner_id: Optional[int]) -> bool:
    if not pair.is_custom:
        return False
    if owner_id is not None:
        return pair.created_by == owner_id
    return pair.created_by is None


def pair_limit(owner_id: Optional[int]):
    limit = int(current_app.config.get('CUSTOM_PAIR_LIMIT', 10))
    count = len(owned_pairs(owner_id))
    return {'can_create': count < limit, 'count': count, 'limit': limit}


def create_custom_pair(term_0, term_1, owner_id: Optional[int] = None) -> Pair:
    term_0, term_1 = _clean_terms(term_0, term_1)
    if pair_exists(term_0, term_1):
        raise PairExistsError(f'Pair "{term_0}" / "{term_1}" already exists')
    limit = pair_limit(owner_id)
    if not limit['can_create']:
        raise PairLimitError(f"Custom pair limit of {limit['limit']} reached")

    pair = Pair(term_0=term_0, term_1=term_1, is_custom=True, created_by=owner_id)
    db.session.add(pair)
    db.session.commit()
    current_app.logger.info(f"[pair-create] pair={pair.id} owner={owner_id}")
    return pair


def _get_modifiable(pair_id, owner_id):
    pair = db.session.get(Pair, pair_id)
    if pair is None or not pair.is_custom:
        raise PairNotFoundError('Pair not found or is not a custom pair')
    if not can_modify_pair(pair, owner_id):
        raise PairPermissionError('You can only change your own pairs')
    return pair


def update_custom_pair(pair_id, term_0, term_1, owner_id: Optional[int] = None) -> Pair:
    term_0, term_1 = _clean_terms(term_0, term_1)
    pair = _get_modifiable(pair_id, owner_id)
    if pair_exists(term_0, term_1, exclude_id=pair.id):
        raise PairExistsError(f'Pair "{term_0}" / "{term_1}" already exists')
    pair.term_0 = term_0
    pair.term_1 = term_1
    db.session.add(pair)
    db.session.commit()
    current_app.logger.info(f"[pair-update] pair={pair.id} owner={owner_id}")
    return pair


def delete_custom_pair(pair_id, owner_id: Optional[int] = None) -> None:
    pair = _get_modifiable(pair_id, owner_id)
    db.session.delete(pair)
    db.session.commit()
    current_app.logger.info(f"[pair-delete] pair={pair_id} owner={owner_id}")


def random_pair(rng=random, kind='all') -> Optional[Pair]:
    pairs = list_pairs(kind)
    if not pairs:
        return None
    return rng.choice(pairs)


def random_pairs(count, kind='all', rng=random):
    """Up to ``count`` distinct pairs in random order."""
    if count < 0:
        raise ValueError(f'Pair count must not be negative, got {count}')
    pairs = list_pairs(kind)
    return rng.sample(pairs, min(count, len(pairs)))


def pair_counts():
    total = Pair.query.count()
    custom = Pair.query.filter_by(is_custom=True).count()
    return {'total': total, 'custom': custom, 'builtin': total - custom}


def seed_builtin_pairs() -> int:
    """Insert any missing built-in pairs; returns how many were added."""
    added = 0
    for term_0, term_1 in BUILTIN_PAIRS:
        if pair_exists(term_0, term_1):
            continue
        db.session.add(Pair(term_0=term_0, term_1=term_1, is_custom=False))
        db.session.flush()
        added += 1
    db.session.commit()
    return added
