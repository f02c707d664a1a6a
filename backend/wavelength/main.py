from flask import Blueprint, request, jsonify, current_app
from .models import db, User, Player
from flask_login import login_user, logout_user, login_required, current_user

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Wavelength game server!'})

@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({"success": True, "user": user.to_dict()})
    return jsonify({"success": False, "message": "Invalid credentials"}), 401

@main.route('/register', methods=['POST', 'OPTIONS'])
def register():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    if not data.get('username') or not data.get('password'):
        return jsonify({"success": False, "message": "Missing username or password"}), 400
    if User.query.filter_by(username=data['username']).first():
        return jsonify({"success": False, "message": "Username already exists"}), 400

    new_user = User(username=data['username'])
    new_user.set_password(data['password'])
    db.session.add(new_user)
    db.session.commit()
    login_user(new_user)
    current_app.logger.info(f"[register] user={new_user.id}")
    return jsonify({"success": True, "user": new_user.to_dict()}), 201

@main.route('/check_login', methods=['GET'])
def check_login():
    if current_user.is_authenticated:
        return jsonify({"success": True, "user": current_user.to_dict()})
    return jsonify({"success": False, "user": None})

@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})

@main.route('/api/players/recent', methods=['GET'])
def recent_players():
    """Distinct player names, most recently used first."""
    default_limit = int(current_app.config.get('RECENT_PLAYERS_LIMIT', 8))
    limit = max(0, request.args.get('limit', default_limit, type=int))
    latest = db.func.max(Player.id).label('latest')
    rows = (
        db.session.query(Player.name, latest)
        .group_by(Player.name)
        .order_by(latest.desc())
        .limit(limit)
        .all()
    )
    return jsonify([name for name, _ in rows])
