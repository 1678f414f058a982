"""
Notification Channel

Push delivery of duel events. The duel service only talks to the `Notifier`
interface; `SocketIONotifier` delivers through Flask-SocketIO rooms.
"""

from typing import Any, Dict

from ..utils.game_logger import game_logger

OPPONENT_ROUND_UPDATE = 'opponent_round_update'
ROUND_COMPLETED = 'round_completed'
GAME_COMPLETED = 'game_completed'
GAME_STARTED = 'game_started'


def game_room(game_id: str) -> str:
    """Socket.IO room shared by both players of a duel."""
    return f"game_{game_id}"


class Notifier:
    """Interface for pushing duel events to clients."""

    def send_to_player(self, transport_ref: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def broadcast_to_game(self, game_id: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    """Drops every event. Used when no push channel is configured."""

    def send_to_player(self, transport_ref: str, event: str, payload: Dict[str, Any]) -> None:
        pass

    def broadcast_to_game(self, game_id: str, event: str, payload: Dict[str, Any]) -> None:
        pass


class SocketIONotifier(Notifier):
    """Delivers events through a Flask-SocketIO server instance."""

    def __init__(self, socketio):
        self.socketio = socketio

    def send_to_player(self, transport_ref: str, event: str, payload: Dict[str, Any]) -> None:
        try:
            self.socketio.emit(event, payload, room=transport_ref)
        except Exception as e:
            game_logger.logger.error(f"Failed to emit {event} to {transport_ref}: {e}")

    def broadcast_to_game(self, game_id: str, event: str, payload: Dict[str, Any]) -> None:
        try:
            self.socketio.emit(event, payload, room=game_room(game_id))
        except Exception as e:
            game_logger.logger.error(f"Failed to broadcast {event} for game {game_id}: {e}")
