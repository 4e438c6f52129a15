"""Game domain services: rules engine, turn scheduling and sessions.

This package contains the transport-free game logic imported by the
Socket.IO handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""

from .errors import InvalidAction
from .engine import GameEngine
from .registry import SessionRegistry

__all__ = ['InvalidAction', 'GameEngine', 'SessionRegistry']
