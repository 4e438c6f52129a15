from typing import Any, Dict, List, Optional


# Game phases
WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'

TAUNT = 'taunt'


class StatusEffect:
    """A timed effect imposed on a unit by another unit."""

    def __init__(self, kind: str, turns: int, by_unit_id: int):
        self.kind = kind
        self.turns = turns
        self.by_unit_id = by_unit_id

    def to_dict(self):
        return {
            'type': self.kind,
            'turns': self.turns,
            'byUnitId': self.by_unit_id,
        }


class Unit:
    """A live unit on the board.

    Archetype fields are copied from the catalog entry at creation; the rest
    is per-unit mutable state. Fields that only some archetypes use (heal
    amount, generator yield and lifetime) are None elsewhere.
    """

    def __init__(self, unit_id: int, owner: str, archetype: Dict[str, Any], x: int, y: int):
        self.id = unit_id
        self.owner = owner
        self.type = archetype['type']
        self.cost = archetype['cost']
        self.max_health = archetype['health']
        self.health = archetype['health']
        self.damage = archetype['damage']
        self.range = archetype['range']
        self.speed = archetype['speed']
        self.ability: Optional[str] = archetype.get('ability')
        self.heal_amount: Optional[int] = archetype.get('heal_amount')
        self.energy_per_turn: Optional[int] = archetype.get('energy_per_turn')
        self.max_turns: Optional[int] = archetype.get('max_turns')
        self.x = x
        self.y = y
        self.has_moved = False
        self.has_attacked = False
        self.status_effects: List[StatusEffect] = []
        self.turns_active = 0

    def distance_to(self, x: int, y: int) -> int:
        return abs(x - self.x) + abs(y - self.y)

    def status(self, kind: str) -> Optional[StatusEffect]:
        for effect in self.status_effects:
            if effect.kind == kind:
                return effect
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'owner': self.owner,
            'type': self.type,
            'cost': self.cost,
            'health': self.health,
            'maxHealth': self.max_health,
            'damage': self.damage,
            'range': self.range,
            'speed': self.speed,
            'ability': self.ability,
            'healAmount': self.heal_amount,
            'energyPerTurn': self.energy_per_turn,
            'maxTurns': self.max_turns,
            'x': self.x,
            'y': self.y,
            'hasMoved': self.has_moved,
            'hasAttacked': self.has_attacked,
            'statusEffects': [e.to_dict() for e in self.status_effects],
            'turnsActive': self.turns_active,
        }


class Player:
    def __init__(self, player_id: str, energy: int):
        self.id = player_id
        self.energy = energy
        self.has_deployed = False


class Cell:
    def __init__(self):
        self.unit_id: Optional[int] = None

    @property
    def occupied(self) -> bool:
        return self.unit_id is not None

    def to_dict(self):
        return {'occupied': self.occupied, 'unitId': self.unit_id}
