from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
import os
from config import Config

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'migrations')

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:4200",
    "http://127.0.0.1:4200",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db, directory=MIGRATIONS_DIR)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from numguess.routes import main as index_bp
    flask_app.register_blueprint(index_bp)

    from numguess.main import auth
    flask_app.register_blueprint(auth)

    from numguess.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from numguess.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from numguess.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'unauthorized', 'message': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from numguess.services.games.statistics import get_or_create
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('Password1')
                db.session.add(user)
            db.session.commit()

            for user in User.query.all():
                get_or_create(user.id)
            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('reconcile-stats')
    def reconcile_stats_command():
        """Creates missing statistics rows once and reports how many."""
        from numguess.services.games.scheduler import reconcile_missing_statistics
        created = reconcile_missing_statistics(flask_app)
        print(f'Created statistics for {created} user(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(reconcile_stats_command)

    return flask_app
