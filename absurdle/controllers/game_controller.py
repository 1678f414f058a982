"""
Game Controller

Handles all single-player HTTP endpoints.
"""

from flask import Blueprint, current_app, request, jsonify
from ..config.game_settings import get_word_statistics
from ..services.game_service import get_game_service
from ..services.duel_service import get_duel_service
from ..services.lobby_service import get_lobby_service
from ..utils.decorators import handle_game_errors
from ..utils.game_logger import game_logger
from ..utils.helpers import get_json_body, require_field, to_payload

game_bp = Blueprint('game', __name__)


def _service_unavailable():
    return jsonify({
        'success': False,
        'error': 'Game service unavailable'
    }), 500


@game_bp.route('/start', methods=['POST'])
@handle_game_errors('start_session')
def start_session():
    """Create a new single-player session."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    data = get_json_body(required=False)
    mode = data.get('mode', current_app.config.get('DEFAULT_MODE', 'adaptive'))

    game_logger.log_user_action(request, 'start_session', mode=mode)

    result = game_service.start_session(mode)
    response_data = {
        'success': True,
        **to_payload(result)
    }

    game_logger.log_server_response(request, 'start_session', True, response_data, result.session_id,
                                    max_trials=result.max_trials)
    return jsonify(response_data)


@game_bp.route('/validate/<session_id>', methods=['GET'])
@handle_game_errors('validate_session')
def validate_session(session_id):
    """Get the resumable state of a session."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    game_logger.log_user_action(request, 'validate_session', session_id)

    view = game_service.validate_session(session_id)
    response_data = {
        'success': True,
        **to_payload(view)
    }

    game_logger.log_server_response(request, 'validate_session', True, response_data, session_id,
                                    valid=view.valid)
    return jsonify(response_data)


@game_bp.route('/submit', methods=['POST'])
@handle_game_errors('submit_guess')
def submit_guess():
    """Submit a guess for evaluation."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    data = get_json_body()
    session_id = require_field(data, 'session_id')
    guess = require_field(data, 'guess')

    game_logger.log_user_action(request, 'submit_guess', session_id, guess=guess)

    outcome = game_service.submit_guess(session_id, guess)
    response_data = {
        'success': True,
        **to_payload(outcome)
    }

    game_logger.log_server_response(
        request, 'submit_guess', True, response_data, session_id,
        correct=outcome.correct, completed=outcome.completed
    )
    return jsonify(response_data)


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()
        duel_service = get_duel_service()
        lobby_service = get_lobby_service()

        response_data = {
            'status': 'healthy',
            'active_sessions': game_service.active_sessions_count() if game_service else 0,
            'active_duels': duel_service.active_games_count() if duel_service else 0,
            'waiting_players': lobby_service.waiting_count() if lobby_service else 0,
            'word_statistics': get_word_statistics(game_service.word_list) if game_service else {},
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        return jsonify(error_response), 500
