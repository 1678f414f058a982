"""
Controller Decorators

Contains the decorator that turns service errors into JSON error responses
for HTTP endpoints.
"""

from functools import wraps
from flask import request, jsonify

from ..errors import GameError, NotFoundError, StateError, ValidationError
from .game_logger import game_logger


def error_status(error: Exception) -> int:
    """HTTP status code for a service error."""
    # NotFoundError precedes StateError so UnknownPlayerError maps to 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, StateError):
        return 409
    return 500


def handle_game_errors(action: str):
    """
    Decorator for endpoints that call into the game services.

    Expected errors become `{'success': False, 'error': ...}` responses with
    the matching status code; anything else is logged as an error and
    reported as a 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            game_id = kwargs.get('game_id') or kwargs.get('session_id')
            try:
                return f(*args, **kwargs)
            except GameError as e:
                status = error_status(e)
                error_response = {
                    'success': False,
                    'error': str(e)
                }
                game_logger.log_server_response(request, action, False, error_response, game_id,
                                                error_type=type(e).__name__)
                return jsonify(error_response), status
            except Exception as e:
                game_logger.log_error(request, e, action, game_id)
                error_response = {
                    'success': False,
                    'error': str(e)
                }
                game_logger.log_server_response(request, action, False, error_response, game_id)
                return jsonify(error_response), 500

        return decorated_function
    return decorator
