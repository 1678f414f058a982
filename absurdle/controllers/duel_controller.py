"""
Duel Controller

Handles all matchmaking and two-player duel HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from ..services.duel_service import get_duel_service
from ..utils.decorators import handle_game_errors
from ..utils.game_logger import game_logger
from ..utils.helpers import get_json_body, require_field, to_payload

duel_bp = Blueprint('duel', __name__)


def _service_unavailable():
    return jsonify({
        'success': False,
        'error': 'Duel service unavailable'
    }), 500


@duel_bp.route('/duel/join', methods=['POST'])
@handle_game_errors('join_duel')
def join_duel():
    """Join the matchmaking queue or an opponent's waiting game."""
    duel_service = get_duel_service()
    if not duel_service:
        return _service_unavailable()

    data = get_json_body()
    player_name = require_field(data, 'player_name')

    game_logger.log_user_action(request, 'join_duel', player_name=player_name)

    result = duel_service.join_duel(player_name)
    response_data = {
        'success': True,
        **to_payload(result)
    }

    game_logger.log_server_response(request, 'join_duel', True, response_data, result.game_id,
                                    waiting=result.waiting)
    return jsonify(response_data)


@duel_bp.route('/duel/<game_id>/state', methods=['GET'])
@handle_game_errors('get_duel_state')
def get_duel_state(game_id):
    """Get the sanitized duel state."""
    duel_service = get_duel_service()
    if not duel_service:
        return _service_unavailable()

    game_logger.log_user_action(request, 'get_duel_state', game_id)

    response_data = {
        'success': True,
        'state': duel_service.get_duel_state(game_id)
    }

    game_logger.log_server_response(request, 'get_duel_state', True, response_data, game_id)
    return jsonify(response_data)


@duel_bp.route('/duel/<game_id>/guess', methods=['POST'])
@handle_game_errors('duel_guess')
def submit_duel_guess(game_id):
    """Submit this round's guess in a duel."""
    duel_service = get_duel_service()
    if not duel_service:
        return _service_unavailable()

    data = get_json_body()
    player_id = require_field(data, 'player_id')
    guess = require_field(data, 'guess')

    game_logger.log_user_action(request, 'duel_guess', game_id, player_id=player_id, guess=guess)

    outcome = duel_service.submit_duel_guess(game_id, player_id, guess)
    response_data = {
        'success': True,
        **to_payload(outcome)
    }

    game_logger.log_server_response(
        request, 'duel_guess', True, response_data, game_id,
        waiting_for_opponent=outcome.waiting_for_opponent
    )
    return jsonify(response_data)
