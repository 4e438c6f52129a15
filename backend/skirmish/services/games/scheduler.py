"""Turn scheduling: end-of-turn bookkeeping and start-of-turn processing.

Functions here are called by ``GameEngine`` while it holds its lock; they
never acquire it themselves.
"""

import logging

from skirmish.models import FINISHED
from .errors import InvalidAction
from .victory import check_win_condition

logger = logging.getLogger(__name__)


def end_turn(engine, player_id: str) -> None:
    """Finish ``player_id``'s turn and hand control to the opponent.

    - Increments the turn counter
    - Resets move/attack flags on the ending player's units
    - Decays status effects on the opponent's units, dropping expired ones
    - Flips the turn and runs start-of-turn processing for the opponent
    """
    engine.require_turn(player_id)
    opponent = engine.opponent_of(player_id)
    if opponent is None:
        raise InvalidAction(InvalidAction.SESSION, 'Waiting for an opponent')

    engine.turn_number += 1
    for unit in engine.units.values():
        if unit.owner == player_id:
            unit.has_moved = False
            unit.has_attacked = False
        elif unit.owner == opponent:
            decay_status_effects(unit)

    engine.current_turn = opponent
    logger.info(f"[end-turn] game={engine.game_id} ended_by={player_id} turn_number={engine.turn_number}")
    start_turn(engine)


def decay_status_effects(unit) -> None:
    remaining = []
    for effect in unit.status_effects:
        effect.turns -= 1
        if effect.turns > 0:
            remaining.append(effect)
    unit.status_effects = remaining


def start_turn(engine) -> None:
    check_win_condition(engine)
    if engine.phase == FINISHED:
        engine.broadcast()
        return

    player = engine.players[engine.current_turn]
    player.energy += engine.turn_energy
    process_generators(engine)
    logger.info(f"[start-turn] game={engine.game_id} player={player.id} energy={player.energy}")
    engine.broadcast()


def process_generators(engine) -> None:
    """Tick every generator owned by the player whose turn is starting.

    Each yields its energy, then self-destructs once it has been active for
    its full lifetime.
    """
    owner = engine.players[engine.current_turn]
    generators = [u for u in engine.units.values() if u.type == 'generator' and u.owner == owner.id]
    for generator in generators:
        generator.turns_active += 1
        owner.energy += generator.energy_per_turn or 0
        if generator.max_turns is not None and generator.turns_active >= generator.max_turns:
            engine.remove_unit(generator)
            logger.info(f"[generator-expired] game={engine.game_id} unit={generator.id} owner={owner.id}")
