import logging
import random
import string
import threading
from typing import Dict, List, Optional, Tuple

from skirmish.models import WAITING, FINISHED
from .engine import GameEngine, Broadcast
from .errors import InvalidAction

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every live match and the connection -> (game, player) bindings.

    Player ids are the connection ids that created or joined the game.
    Lock order is registry first, then engine.
    """

    def __init__(self, broadcast: Optional[Broadcast] = None, rules: Optional[dict] = None,
                 code_length: int = 6):
        self._broadcast = broadcast
        self._rules = dict(rules or {})
        self._code_length = code_length
        self._games: Dict[str, GameEngine] = {}
        self._bindings: Dict[str, Tuple[str, str]] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._games)

    def _generate_game_id(self) -> str:
        """Generate a unique, short game code."""
        while True:
            code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=self._code_length))
            if code not in self._games:
                return code

    @staticmethod
    def _normalize(game_id) -> Optional[str]:
        if not isinstance(game_id, str):
            return None
        return game_id.strip().upper()

    def create(self, connection_id: str) -> GameEngine:
        with self._lock:
            self._release_finished(connection_id)
            if connection_id in self._bindings:
                raise InvalidAction(InvalidAction.SESSION, 'Already in a game')
            game_id = self._generate_game_id()
            engine = GameEngine(game_id, connection_id, broadcast=self._broadcast, **self._rules)
            engine.add_player(connection_id)
            self._games[game_id] = engine
            self._bindings[connection_id] = (game_id, connection_id)
        logger.info(f"[create] game={game_id} host={connection_id}")
        return engine

    def join(self, connection_id: str, game_id) -> GameEngine:
        with self._lock:
            self._release_finished(connection_id)
            if connection_id in self._bindings:
                raise InvalidAction(InvalidAction.SESSION, 'Already in a game')
            engine = self._games.get(self._normalize(game_id))
            if engine is None:
                raise InvalidAction(InvalidAction.SESSION, 'Game not found')
            engine.add_player(connection_id)
            self._bindings[connection_id] = (engine.game_id, connection_id)
        logger.info(f"[join] game={engine.game_id} player={connection_id}")
        return engine

    def resolve(self, connection_id: str) -> Tuple[GameEngine, str]:
        with self._lock:
            binding = self._bindings.get(connection_id)
            engine = self._games.get(binding[0]) if binding else None
        if engine is None:
            raise InvalidAction(InvalidAction.SESSION, 'Not in a game')
        return engine, binding[1]

    def disconnect(self, connection_id: str) -> Optional[GameEngine]:
        """Unbind a connection; discards its game once nobody is left in it."""
        with self._lock:
            return self._unbind(connection_id)

    def _unbind(self, connection_id: str) -> Optional[GameEngine]:
        binding = self._bindings.pop(connection_id, None)
        if binding is None:
            return None
        game_id, player_id = binding
        engine = self._games.get(game_id)
        if engine is None:
            return None
        engine.remove_player(player_id)
        if not engine.players:
            del self._games[game_id]
            logger.info(f"[discard] game={game_id} empty")
        return engine

    def _release_finished(self, connection_id: str) -> None:
        """Drop a binding whose game is over so the connection can play again."""
        binding = self._bindings.get(connection_id)
        if binding is None:
            return
        engine = self._games.get(binding[0])
        if engine is None or engine.phase == FINISHED:
            self._unbind(connection_id)

    def get(self, game_id) -> Optional[GameEngine]:
        with self._lock:
            return self._games.get(self._normalize(game_id))

    def open_games(self) -> List[GameEngine]:
        """Games still waiting for a second player."""
        with self._lock:
            engines = list(self._games.values())
        return [e for e in engines if e.phase == WAITING]
