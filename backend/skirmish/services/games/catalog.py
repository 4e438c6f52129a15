"""Unit archetypes available for deployment.

Keys are snake_case; the wire serialisation of a deployed unit lives on
``skirmish.models.Unit``.
"""

from typing import Any, Dict, Optional


UNIT_TYPES: Dict[str, Dict[str, Any]] = {
    'melee': {
        'type': 'melee',
        'cost': 2,
        'health': 100,
        'damage': 25,
        'range': 1,
        'speed': 2,
    },
    'ranged': {
        'type': 'ranged',
        'cost': 3,
        'health': 60,
        'damage': 30,
        'range': 3,
        'speed': 1,
    },
    'medic': {
        'type': 'medic',
        'cost': 4,
        'health': 50,
        'damage': 0,  # cannot attack
        'range': 2,  # heal range
        'speed': 1,
        'ability': 'heal',
        'heal_amount': 30,
    },
    'guardian': {
        'type': 'guardian',
        'cost': 5,
        'health': 150,
        'damage': 15,
        'range': 1,
        'speed': 1,
        'ability': 'taunt',
    },
    'generator': {
        'type': 'generator',
        'cost': 6,
        'health': 80,
        'damage': 0,
        'range': 0,
        'speed': 0,  # immobile
        'ability': 'generate',
        'energy_per_turn': 1,
        'max_turns': 10,  # self-destructs after this many owner turns
    },
}


def get_archetype(unit_type) -> Optional[Dict[str, Any]]:
    if not isinstance(unit_type, str):
        return None
    return UNIT_TYPES.get(unit_type)


def catalog_to_dict() -> Dict[str, Dict[str, Any]]:
    """Catalog in the camelCase shape clients see on deployed units."""
    out = {}
    for name, entry in UNIT_TYPES.items():
        out[name] = {
            'type': entry['type'],
            'cost': entry['cost'],
            'health': entry['health'],
            'damage': entry['damage'],
            'range': entry['range'],
            'speed': entry['speed'],
            'ability': entry.get('ability'),
            'healAmount': entry.get('heal_amount'),
            'energyPerTurn': entry.get('energy_per_turn'),
            'maxTurns': entry.get('max_turns'),
        }
    return out
