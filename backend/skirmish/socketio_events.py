from flask import current_app, request
from flask_socketio import emit

from skirmish import socketio
from skirmish.services.games import InvalidAction, SessionRegistry


# Prefix of the error notice sent back for each rejected action
ACTION_LABELS = {
    'deployUnit': 'Invalid deployment',
    'moveUnit': 'Invalid move',
    'attackUnit': 'Invalid attack',
    'useAbility': 'Invalid ability use',
    'endTurn': 'Cannot end turn',
}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _sessions() -> SessionRegistry:
    return current_app.extensions['skirmish.sessions']


def _reject(exc: InvalidAction, label=None) -> None:
    current_app.logger.info(f"[rejected] sid={_get_sid()} kind={exc.kind} reason={exc.message}")
    message = f"{label}: {exc.message}" if label else exc.message
    emit('error', {'message': message})


def _field(data, key):
    if not isinstance(data, dict) or key not in data:
        raise InvalidAction(InvalidAction.PLACEMENT, f'{key} is required')
    return data[key]


def _int_field(data, key) -> int:
    value = _field(data, key)
    if isinstance(value, bool):
        raise InvalidAction(InvalidAction.PLACEMENT, f'{key} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            pass
    raise InvalidAction(InvalidAction.PLACEMENT, f'{key} must be an integer')


def make_broadcaster(namespace: str):
    """Build the callable engines use to push snapshots to their players."""
    def broadcast(recipients, snapshot):
        for sid in recipients:
            socketio.emit('gameState', snapshot, to=sid, namespace=namespace)
    return broadcast


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    engine = _sessions().disconnect(sid)
    if engine is not None:
        current_app.logger.info(f"[disconnect] sid={sid} game={engine.game_id} reason={reason}")


def handle_create_game(data=None):
    sid = _get_sid()
    try:
        engine = _sessions().create(sid)
    except InvalidAction as exc:
        _reject(exc)
        return
    emit('gameCreated', {'gameId': engine.game_id, 'playerId': sid})


def handle_join_game(data=None):
    sid = _get_sid()
    try:
        game_id = _field(data, 'gameId')
        engine = _sessions().join(sid, game_id)
    except InvalidAction as exc:
        _reject(exc)
        return
    emit('gameJoined', {'gameId': engine.game_id, 'playerId': sid})


def _dispatch(event: str, data, action) -> None:
    """Resolve the caller's game and run ``action(engine, player_id, data)``."""
    try:
        engine, player_id = _sessions().resolve(_get_sid())
        action(engine, player_id, data)
    except InvalidAction as exc:
        _reject(exc, ACTION_LABELS[event])


def handle_deploy_unit(data=None):
    _dispatch('deployUnit', data, lambda engine, player_id, d: engine.deploy_unit(
        player_id, _field(d, 'unitType'), _int_field(d, 'x'), _int_field(d, 'y')))


def handle_move_unit(data=None):
    _dispatch('moveUnit', data, lambda engine, player_id, d: engine.move_unit(
        player_id, _int_field(d, 'unitId'), _int_field(d, 'x'), _int_field(d, 'y')))


def handle_attack_unit(data=None):
    _dispatch('attackUnit', data, lambda engine, player_id, d: engine.attack_unit(
        player_id, _int_field(d, 'attackerId'), _int_field(d, 'targetId')))


def handle_use_ability(data=None):
    _dispatch('useAbility', data, lambda engine, player_id, d: engine.use_ability(
        player_id, _int_field(d, 'unitId'), _int_field(d, 'targetId')))


def handle_end_turn(data=None):
    _dispatch('endTurn', data, lambda engine, player_id, d: engine.end_turn(player_id))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createGame', handle_create_game, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('deployUnit', handle_deploy_unit, namespace=namespace)
    socketio.on_event('moveUnit', handle_move_unit, namespace=namespace)
    socketio.on_event('attackUnit', handle_attack_unit, namespace=namespace)
    socketio.on_event('useAbility', handle_use_ability, namespace=namespace)
    socketio.on_event('endTurn', handle_end_turn, namespace=namespace)
