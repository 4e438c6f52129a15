from flask import Blueprint, current_app, jsonify
from skirmish.services.games.catalog import catalog_to_dict

games = Blueprint('games', __name__)


def _sessions():
    return current_app.extensions['skirmish.sessions']


@games.route('/units', methods=['GET'])
def list_unit_types():
    """
    Returns the unit catalog keyed by unit type.
    """
    return jsonify(catalog_to_dict()), 200


@games.route('/open', methods=['GET'])
def list_open_games():
    """
    Returns games still waiting for a second player.
    """
    open_games = [
        {'gameId': engine.game_id, 'players': len(engine.players)}
        for engine in _sessions().open_games()
    ]
    return jsonify(open_games), 200


@games.route('/<string:game_id>/state', methods=['GET'])
def get_game_state(game_id):
    """
    Returns the full snapshot of a game.
    """
    engine = _sessions().get(game_id)
    if engine is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(engine.snapshot()), 200
