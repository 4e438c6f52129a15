import logging

from skirmish.models import FINISHED

logger = logging.getLogger(__name__)


def check_win_condition(engine) -> None:
    """Finish the game once a side has no live units left.

    Not evaluated until both players are seated and ``win_check_min_turns``
    end-turns have passed, so neither side loses before it could deploy.
    If both sides are empty the game ends in a draw.
    """
    if len(engine.players) < 2:
        return
    if engine.turn_number < engine.win_check_min_turns:
        return

    counts = {pid: 0 for pid in engine.players}
    for unit in engine.units.values():
        if unit.owner in counts:
            counts[unit.owner] += 1
    survivors = [pid for pid, n in counts.items() if n > 0]
    if len(survivors) == len(counts):
        return

    engine.phase = FINISHED
    if survivors:
        engine.winner = survivors[0]
        logger.info(f"[finish] game={engine.game_id} winner={engine.winner} turn_number={engine.turn_number}")
    else:
        engine.winner = None
        engine.draw = True
        logger.info(f"[finish] game={engine.game_id} draw turn_number={engine.turn_number}")
