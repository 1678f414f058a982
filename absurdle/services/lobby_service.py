"""
Lobby Service

Owns the duel matchmaking queue: a FIFO of players waiting for an opponent.
"""

import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Deque, Iterator, Optional


@dataclass(frozen=True)
class WaitingEntry:
    """A player parked in the queue together with the game created for them."""
    player_id: str
    game_id: str


class LobbyService:
    """
    Matchmaking queue with its own critical section.

    Callers open `matchmaking()` and, while holding it, `dequeue()` a waiting
    entry or `join()` a new one. This makes the pop-check-push sequence of a
    duel join atomic with respect to every other join.
    """

    def __init__(self):
        self._waiting: Deque[WaitingEntry] = deque()
        self._lock = threading.Lock()
        self._held_by: Optional[int] = None

    @contextmanager
    def matchmaking(self) -> Iterator["LobbyService"]:
        with self._lock:
            self._held_by = threading.get_ident()
            try:
                yield self
            finally:
                self._held_by = None

    def _require_held(self) -> None:
        if self._held_by != threading.get_ident():
            raise RuntimeError("Queue access requires the matchmaking() critical section")

    def dequeue(self) -> Optional[WaitingEntry]:
        """Pops the oldest waiting entry, or returns None if nobody is waiting."""
        self._require_held()
        if not self._waiting:
            return None
        return self._waiting.popleft()

    def join(self, player_id: str, game_id: str) -> WaitingEntry:
        """Parks a player until an opponent arrives."""
        self._require_held()
        entry = WaitingEntry(player_id=player_id, game_id=game_id)
        self._waiting.append(entry)
        return entry

    def waiting_count(self) -> int:
        return len(self._waiting)


# Global service instance
_lobby_service = None


def get_lobby_service() -> Optional[LobbyService]:
    """Get the global lobby service instance."""
    return _lobby_service


def initialize_lobby_service() -> LobbyService:
    """Initialize the global lobby service instance."""
    global _lobby_service
    _lobby_service = LobbyService()
    return _lobby_service
