"""
WebSocket Event Handlers

Handles all WebSocket events for real-time duel functionality.
"""

from dataclasses import asdict

from flask import request
from flask_socketio import emit, join_room, leave_room
from ..errors import GameError
from ..services.duel_service import get_duel_service
from ..services.notifier import game_room
from ..utils.decorators import error_status
from ..utils.game_logger import game_logger


def _emit_error(error: Exception):
    emit('error', {'error': str(error), 'status': error_status(error)})


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        game_logger.logger.info(f"WebSocket connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect():
        """Handle WebSocket disconnection."""
        # Abandoned duels are left to expire from the store
        game_logger.logger.info(f"WebSocket disconnected: {request.sid}")

    @socketio.on('join_duel_game')
    def handle_join_duel_game(data):
        """Join a duel room and bind this connection for targeted pushes."""
        duel_service = get_duel_service()
        if not duel_service:
            emit('error', {'error': 'Duel service unavailable'})
            return

        data = data or {}
        game_id = data.get('game_id')
        player_id = data.get('player_id')
        if not game_id or not player_id:
            emit('error', {'error': 'Game ID and player ID are required'})
            return

        try:
            # Join the room first so this client also receives game_started
            join_room(game_room(game_id))
            state = duel_service.attach_connection(game_id, player_id, request.sid)
        except GameError as e:
            leave_room(game_room(game_id))
            _emit_error(e)
            return

        game_logger.logger.info(f"WebSocket: {player_id} joined duel {game_id}")

        emit('game_state_update', {
            'success': True,
            'state': state
        })

    @socketio.on('leave_duel_game')
    def handle_leave_duel_game(data):
        """Leave a duel room."""
        game_id = (data or {}).get('game_id')
        if not game_id:
            emit('error', {'error': 'Game ID is required'})
            return

        leave_room(game_room(game_id))
        game_logger.logger.info(f"WebSocket: {request.sid} left duel {game_id}")

    @socketio.on('submit_duel_guess')
    def handle_submit_duel_guess(data):
        """Submit a duel guess via WebSocket."""
        duel_service = get_duel_service()
        if not duel_service:
            emit('error', {'error': 'Duel service unavailable'})
            return

        data = data or {}
        try:
            outcome = duel_service.submit_duel_guess(data.get('game_id'), data.get('player_id'), data.get('guess'))
        except GameError as e:
            emit('guess_result', {'success': False, 'error': str(e), 'status': error_status(e)})
            return

        emit('guess_result', {'success': True, 'result': asdict(outcome)})
