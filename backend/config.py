import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of allowed origins, '*' allows any
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Length of the join codes handed out to hosts
    GAME_CODE_LENGTH = int(os.environ.get('GAME_CODE_LENGTH', '6'))
    # Rule tunables
    BOARD_SIZE = int(os.environ.get('BOARD_SIZE', '8'))
    STARTING_ENERGY = int(os.environ.get('STARTING_ENERGY', '10'))
    TURN_START_ENERGY = int(os.environ.get('TURN_START_ENERGY', '2'))
    ATTACK_ENERGY_COST = int(os.environ.get('ATTACK_ENERGY_COST', '2'))
    ABILITY_ENERGY_COST = int(os.environ.get('ABILITY_ENERGY_COST', '1'))
    # No winner is declared before this many end-turns (two full turns each)
    WIN_CHECK_MIN_TURNS = int(os.environ.get('WIN_CHECK_MIN_TURNS', '4'))
    # Turns a taunt stays on its target; it decays at the start of the target owner's turn
    TAUNT_DURATION = int(os.environ.get('TAUNT_DURATION', '1'))


def rules_from_config(config) -> dict:
    """Map Flask config keys onto GameEngine keyword arguments."""
    return {
        'board_size': int(config.get('BOARD_SIZE', 8)),
        'starting_energy': int(config.get('STARTING_ENERGY', 10)),
        'turn_energy': int(config.get('TURN_START_ENERGY', 2)),
        'attack_cost': int(config.get('ATTACK_ENERGY_COST', 2)),
        'ability_cost': int(config.get('ABILITY_ENERGY_COST', 1)),
        'win_check_min_turns': int(config.get('WIN_CHECK_MIN_TURNS', 4)),
        'taunt_duration': int(config.get('TAUNT_DURATION', 1)),
    }
