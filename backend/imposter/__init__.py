from flask import Flask, jsonify, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from sqlalchemy.exc import OperationalError
import random
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
cors = CORS()


def game_rng() -> random.Random:
    """Random source shared by lobby codes, avatar colours, imposters and words."""
    return current_app.extensions['game_rng']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    cors.init_app(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    seed = flask_app.config.get('RANDOM_SEED')
    flask_app.extensions['game_rng'] = random.Random(seed)

    # Import and register blueprints here
    from imposter.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from imposter.api.lobby import lobby
    flask_app.register_blueprint(lobby, url_prefix='/api/lobby')

    from imposter.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    from imposter.errors import GameError, UnavailableError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(OperationalError)
    def handle_store_error(exc):
        db.session.rollback()
        flask_app.logger.error(f"[store-unavailable] {exc}")
        err = UnavailableError('Game store is unavailable, try again')
        return jsonify(err.to_dict()), err.status_code

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from imposter.models import seed_categories
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_categories()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    from imposter.cli import register_cli
    register_cli(flask_app)

    return flask_app
