from wavelength import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import string
import random


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


def generate_session_code(length=4):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not GameSession.query.filter_by(code=code).first():
            return code


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(4), unique=True, index=True)
    status = db.Column(db.String(32), default='lobby')  # lobby, in_progress
    current_round = db.Column(db.Integer, nullable=True)
    psychic_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    players = db.relationship('Player', back_populates='session', order_by='Player.join_order',
                              cascade='all, delete-orphan')
    rounds = db.relationship('Round', back_populates='session', order_by='Round.number',
                             cascade='all, delete-orphan')

    def __init__(self, **kwargs):
        super(GameSession, self).__init__(**kwargs)
        if not self.code:
            self.code = generate_session_code()

    @property
    def room(self):
        return f"session:{self.code}"

    @property
    def active_round(self):
        if self.current_round is None:
            return None
        return Round.query.filter_by(session_id=self.id, number=self.current_round).first()

    def player_by_id(self, player_id):
        return Player.query.filter_by(id=player_id, session_id=self.id).first()

    def to_dict(self):
        rnd = self.active_round
        voted_ids = {v.player_id for v in rnd.votes} if rnd else set()
        players = []
        for p in self.players:
            pd = p.to_dict()
            pd['has_voted'] = p.id in voted_ids
            players.append(pd)
        return {
            'id': self.id,
            'code': self.code,
            'status': self.status,
            'players': players,
            'current_round': self.current_round,
            'psychic_id': self.psychic_id,
            'round': rnd.to_dict() if rnd else None,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    join_order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    session = db.relationship('GameSession', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'session_id': self.session_id,
            'score': self.score,
        }


class Round(db.Model):
    __tablename__ = 'round'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=False)
    number = db.Column(db.Integer, nullable=False)
    goal_start = db.Column(db.Integer, nullable=False)
    goal_end = db.Column(db.Integer, nullable=False)
    stage = db.Column(db.String(32), default='awaiting_votes', nullable=False)  # awaiting_votes, all_voted, revealed
    psychic_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    pair_id = db.Column(db.Integer, db.ForeignKey('pair.id', ondelete='SET NULL'), nullable=True)
    positive = db.Column(db.String(128), nullable=False)
    negative = db.Column(db.String(128), nullable=False)
    session = db.relationship('GameSession', back_populates='rounds')
    votes = db.relationship('Vote', backref='round', cascade='all, delete-orphan')
    scores = db.relationship('RoundScore', backref='round', cascade='all, delete-orphan')

    __table_args__ = (db.UniqueConstraint('session_id', 'number', name='uq_round_session_number'),)

    def to_dict(self):
        # Goal zone stays hidden until the reveal
        data = {
            'number': self.number,
            'stage': self.stage,
            'psychic_id': self.psychic_id,
            'pair': {'positive': self.positive, 'negative': self.negative},
            'vote_count': len(self.votes),
        }
        if self.stage == 'revealed':
            data['goal_zone'] = {'start': self.goal_start, 'end': self.goal_end}
            data['votes'] = {str(v.player_id): v.position for v in self.votes}
        return data


class Vote(db.Model):
    __tablename__ = 'vote'
    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey('round.id'), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    position = db.Column(db.Integer, nullable=False)

    __table_args__ = (db.UniqueConstraint('round_id', 'player_id', name='uq_vote_round_player'),)


class RoundScore(db.Model):
    __tablename__ = 'round_score'
    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey('round.id'), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    round_points = db.Column(db.Integer, nullable=False)
    new_total = db.Column(db.Integer, nullable=False)

    __table_args__ = (db.UniqueConstraint('round_id', 'player_id', name='uq_round_score_round_player'),)


class Pair(db.Model):
    __tablename__ = 'pair'
    id = db.Column(db.Integer, primary_key=True)
    term_0 = db.Column(db.String(128), nullable=False)
    term_1 = db.Column(db.String(128), nullable=False)
    is_custom = db.Column(db.Boolean, default=False, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'term_0': self.term_0,
            'term_1': self.term_1,
            'is_custom': self.is_custom,
            'created_by': self.created_by,
        }
