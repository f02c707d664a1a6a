from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from wavelength.main import main
    flask_app.register_blueprint(main)

    from wavelength.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from wavelength.api.pairs import pairs
    flask_app.register_blueprint(pairs, url_prefix='/api/pairs')

    from wavelength.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from wavelength.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from wavelength.services.pairs import seed_builtin_pairs
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            added = seed_builtin_pairs()
            print(f'Database has been reset and seeded with {added} pairs!')

    @click.command('db-seed')
    def db_seed_command():
        """Adds any missing built-in pairs."""
        from wavelength.services.pairs import seed_builtin_pairs
        with flask_app.app_context():
            added = seed_builtin_pairs()
            print(f'Added {added} built-in pairs.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(db_seed_command)

    return flask_app
