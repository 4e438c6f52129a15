"""Rules engine for a single match.

One ``GameEngine`` owns the board, the units and the energy ledger of one
game. Every public operation runs under the engine's lock and validates all
of its preconditions before touching any state, so a rejected action
(``InvalidAction``) leaves the game exactly as it was.
"""

import logging
import threading
from functools import wraps
from typing import Callable, Dict, List, Optional

from skirmish.models import Cell, Player, StatusEffect, Unit
from skirmish.models import WAITING, PLAYING, FINISHED, TAUNT
from .catalog import get_archetype
from .errors import InvalidAction
from . import scheduler

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2

# Receives the recipients' player ids and the snapshot to deliver to each
Broadcast = Callable[[List[str], dict], None]


def atomic(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


def _heal(engine: 'GameEngine', unit: Unit, target: Unit) -> Callable[[], None]:
    if target.owner != unit.owner:
        raise InvalidAction(InvalidAction.PLACEMENT, 'Can only heal allied units')
    if target.health >= target.max_health:
        raise InvalidAction(InvalidAction.PLACEMENT, 'Target is already at full health')

    def apply():
        target.health = min(target.max_health, target.health + (unit.heal_amount or 0))
    return apply


def _taunt(engine: 'GameEngine', unit: Unit, target: Unit) -> Callable[[], None]:
    if target.owner == unit.owner:
        raise InvalidAction(InvalidAction.PLACEMENT, 'Can only taunt enemy units')

    def apply():
        target.status_effects.append(StatusEffect(TAUNT, engine.taunt_duration, unit.id))
    return apply


# Ability name -> validator returning the mutation to apply.
# Validators raise InvalidAction and must not mutate.
ABILITIES = {
    'heal': _heal,
    'taunt': _taunt,
}


class GameEngine:

    def __init__(self, game_id: str, host_id: str, broadcast: Optional[Broadcast] = None,
                 board_size: int = 8, starting_energy: int = 10, turn_energy: int = 2,
                 attack_cost: int = 2, ability_cost: int = 1, win_check_min_turns: int = 4,
                 taunt_duration: int = 1):
        self.game_id = game_id
        self.host_id = host_id
        self.board_size = board_size
        self.starting_energy = starting_energy
        self.turn_energy = turn_energy
        self.attack_cost = attack_cost
        self.ability_cost = ability_cost
        self.win_check_min_turns = win_check_min_turns
        self.taunt_duration = taunt_duration

        self.phase = WAITING
        self.players: Dict[str, Player] = {}
        self.current_turn = host_id
        self.turn_number = 0
        self.winner: Optional[str] = None
        self.draw = False
        self.grid = [[Cell() for _ in range(board_size)] for _ in range(board_size)]
        self.units: Dict[int, Unit] = {}
        self._next_unit_id = 1
        self._broadcast = broadcast
        self.lock = threading.RLock()

    # ---- players ----

    @atomic
    def add_player(self, player_id: str) -> Player:
        if player_id in self.players:
            raise InvalidAction(InvalidAction.SESSION, 'Already in this game')
        if len(self.players) >= MAX_PLAYERS:
            raise InvalidAction(InvalidAction.SESSION, 'Game is full')
        if self.phase != WAITING:
            raise InvalidAction(InvalidAction.SESSION, 'Game is no longer accepting players')

        player = Player(player_id, self.starting_energy)
        self.players[player_id] = player
        logger.info(f"[player-join] game={self.game_id} player={player_id} count={len(self.players)}")

        if len(self.players) == MAX_PLAYERS:
            self.phase = PLAYING
            scheduler.start_turn(self)
        return player

    @atomic
    def remove_player(self, player_id: str) -> bool:
        """Drop a player and their units. A lone survivor of a running game wins by forfeit."""
        if self.players.pop(player_id, None) is None:
            return False
        for unit in self.units_of(player_id):
            self.remove_unit(unit)
        logger.info(f"[player-leave] game={self.game_id} player={player_id} remaining={len(self.players)}")

        if self.phase == PLAYING and self.players:
            self.phase = FINISHED
            self.winner = next(iter(self.players))
            logger.info(f"[forfeit] game={self.game_id} winner={self.winner}")
            self.broadcast()
        return True

    def opponent_of(self, player_id: str) -> Optional[str]:
        for pid in self.players:
            if pid != player_id:
                return pid
        return None

    def deploy_rows(self, player_id: str) -> range:
        half = self.board_size // 2
        if player_id == self.host_id:
            return range(0, half)
        return range(half, self.board_size)

    # ---- board helpers ----

    def units_of(self, player_id: str) -> List[Unit]:
        return [u for u in self.units.values() if u.owner == player_id]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.board_size and 0 <= y < self.board_size

    def cell(self, x: int, y: int) -> Cell:
        return self.grid[y][x]

    def remove_unit(self, unit: Unit) -> None:
        self.units.pop(unit.id, None)
        self.cell(unit.x, unit.y).unit_id = None

    # ---- validation ----

    def require_turn(self, player_id: str) -> Player:
        if self.phase != PLAYING:
            raise InvalidAction(InvalidAction.TURN, 'Game is not in progress')
        if self.current_turn != player_id or player_id not in self.players:
            raise InvalidAction(InvalidAction.TURN, 'Not your turn')
        return self.players[player_id]

    def _require_energy(self, player: Player, cost: int) -> None:
        if player.energy < cost:
            raise InvalidAction(InvalidAction.RESOURCE, f'Not enough energy (need {cost}, have {player.energy})')

    def _require_square(self, x, y) -> None:
        for value in (x, y):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidAction(InvalidAction.PLACEMENT, 'Coordinates must be integers')
        if not self.in_bounds(x, y):
            raise InvalidAction(InvalidAction.PLACEMENT, 'Position is off the board')

    def _unit(self, unit_id) -> Unit:
        unit = self.units.get(unit_id)
        if unit is None:
            raise InvalidAction(InvalidAction.PLACEMENT, f'No unit with id {unit_id}')
        return unit

    def _own_unit(self, player_id: str, unit_id) -> Unit:
        unit = self._unit(unit_id)
        if unit.owner != player_id:
            raise InvalidAction(InvalidAction.PLACEMENT, 'You do not control that unit')
        return unit

    # ---- actions ----

    @atomic
    def deploy_unit(self, player_id: str, unit_type: str, x: int, y: int) -> Unit:
        player = self.require_turn(player_id)
        archetype = get_archetype(unit_type)
        if archetype is None:
            raise InvalidAction(InvalidAction.PLACEMENT, f'Unknown unit type {unit_type!r}')
        self._require_energy(player, archetype['cost'])
        self._require_square(x, y)
        if y not in self.deploy_rows(player_id):
            raise InvalidAction(InvalidAction.PLACEMENT, f'Row {y} is outside your deployment zone')
        if self.cell(x, y).occupied:
            raise InvalidAction(InvalidAction.PLACEMENT, 'Cell is occupied')

        unit = Unit(self._next_unit_id, player_id, archetype, x, y)
        self._next_unit_id += 1
        self.units[unit.id] = unit
        self.cell(x, y).unit_id = unit.id
        player.energy -= unit.cost
        player.has_deployed = True
        logger.info(f"[deploy] game={self.game_id} player={player_id} unit={unit.id} type={unit.type} at=({x},{y})")
        self.broadcast()
        return unit

    @atomic
    def move_unit(self, player_id: str, unit_id: int, x: int, y: int) -> Unit:
        player = self.require_turn(player_id)
        unit = self._own_unit(player_id, unit_id)
        if unit.has_moved:
            raise InvalidAction(InvalidAction.ACTION_USED, 'Unit has already moved this turn')
        self._require_square(x, y)
        if self.cell(x, y).occupied:
            raise InvalidAction(InvalidAction.PLACEMENT, 'Destination is occupied')
        distance = unit.distance_to(x, y)
        if distance > unit.speed:
            raise InvalidAction(InvalidAction.PLACEMENT, f'Destination is {distance} tiles away, speed is {unit.speed}')
        # one energy per tile
        self._require_energy(player, distance)

        player.energy -= distance
        self.cell(unit.x, unit.y).unit_id = None
        unit.x, unit.y = x, y
        self.cell(x, y).unit_id = unit.id
        unit.has_moved = True
        logger.info(f"[move] game={self.game_id} player={player_id} unit={unit.id} to=({x},{y}) cost={distance}")
        self.broadcast()
        return unit

    @atomic
    def attack_unit(self, player_id: str, attacker_id: int, target_id: int) -> Unit:
        player = self.require_turn(player_id)
        attacker = self._own_unit(player_id, attacker_id)
        target = self._unit(target_id)
        if attacker.has_attacked:
            raise InvalidAction(InvalidAction.ACTION_USED, 'Unit has already acted this turn')
        taunt = attacker.status(TAUNT)
        if taunt is not None and taunt.by_unit_id != target.id:
            raise InvalidAction(InvalidAction.PLACEMENT, f'Unit is taunted and must attack unit {taunt.by_unit_id}')
        if attacker.distance_to(target.x, target.y) > attacker.range:
            raise InvalidAction(InvalidAction.PLACEMENT, 'Target is out of range')
        self._require_energy(player, self.attack_cost)

        player.energy -= self.attack_cost
        target.health -= attacker.damage
        attacker.has_attacked = True
        if target.health <= 0:
            self.remove_unit(target)
            logger.info(f"[kill] game={self.game_id} attacker={attacker.id} target={target.id}")
        else:
            logger.info(f"[attack] game={self.game_id} attacker={attacker.id} target={target.id} health={target.health}")
        self.broadcast()
        return target

    @atomic
    def use_ability(self, player_id: str, unit_id: int, target_id: int) -> Unit:
        player = self.require_turn(player_id)
        unit = self._own_unit(player_id, unit_id)
        target = self._unit(target_id)
        # abilities share the attack action slot
        if unit.has_attacked:
            raise InvalidAction(InvalidAction.ACTION_USED, 'Unit has already acted this turn')
        if unit.distance_to(target.x, target.y) > unit.range:
            raise InvalidAction(InvalidAction.PLACEMENT, 'Target is out of range')
        self._require_energy(player, self.ability_cost)
        validator = ABILITIES.get(unit.ability)
        if validator is None:
            raise InvalidAction(InvalidAction.PLACEMENT, 'Unit has no usable ability')
        apply = validator(self, unit, target)

        apply()
        unit.has_attacked = True
        player.energy -= self.ability_cost
        logger.info(f"[ability] game={self.game_id} unit={unit.id} ability={unit.ability} target={target.id}")
        self.broadcast()
        return target

    @atomic
    def end_turn(self, player_id: str) -> None:
        scheduler.end_turn(self, player_id)

    # ---- snapshots ----

    @atomic
    def snapshot(self) -> dict:
        return {
            'gameId': self.game_id,
            'hostId': self.host_id,
            'currentTurn': self.current_turn,
            'gameState': self.phase,
            'winner': self.winner,
            'draw': self.draw,
            'turnNumber': self.turn_number,
            'grid': [[c.to_dict() for c in row] for row in self.grid],
            'units': [u.to_dict() for u in self.units.values()],
            'energy': {pid: p.energy for pid, p in self.players.items()},
            'players': list(self.players),
        }

    def broadcast(self) -> None:
        if self._broadcast is None:
            return
        self._broadcast(list(self.players), self.snapshot())
