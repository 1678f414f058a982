"""
Services Package

Contains all business logic and service classes.
"""

from .store import KeyedLock, TTLStore
from .notifier import Notifier, NullNotifier, SocketIONotifier
from .game_service import GameService, get_game_service
from .lobby_service import LobbyService, get_lobby_service
from .duel_service import DuelService, determine_winner, get_duel_service

__all__ = [
    'KeyedLock', 'TTLStore',
    'Notifier', 'NullNotifier', 'SocketIONotifier',
    'GameService', 'get_game_service',
    'LobbyService', 'get_lobby_service',
    'DuelService', 'determine_winner', 'get_duel_service'
]
