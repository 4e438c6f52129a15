from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config, rules_from_config

socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    if not raw or raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # Domain services log under the 'skirmish' hierarchy, i.e. through this logger
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Session registry lives on the app so each app (and each test) gets its own
    from skirmish.services.games import SessionRegistry
    from skirmish.socketio_events import make_broadcaster, register_socketio_handlers
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    flask_app.extensions['skirmish.sessions'] = SessionRegistry(
        broadcast=make_broadcaster(namespace),
        rules=rules_from_config(flask_app.config),
        code_length=int(flask_app.config.get('GAME_CODE_LENGTH', 6)),
    )

    # Import and register blueprints here
    from skirmish.main import main
    flask_app.register_blueprint(main)

    from skirmish.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Register Socket.IO event handlers
    register_socketio_handlers(namespace)

    @click.command('unit-catalog')
    def unit_catalog_command():
        """Prints the deployable unit types."""
        from skirmish.services.games.catalog import UNIT_TYPES
        click.echo(f"{'type':<10} {'cost':>4} {'hp':>4} {'dmg':>4} {'rng':>4} {'spd':>4}  ability")
        for name, entry in UNIT_TYPES.items():
            click.echo(
                f"{name:<10} {entry['cost']:>4} {entry['health']:>4} {entry['damage']:>4} "
                f"{entry['range']:>4} {entry['speed']:>4}  {entry.get('ability') or '-'}"
            )

    flask_app.cli.add_command(unit_catalog_command)

    return flask_app
