"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .game_logger import game_logger
from .decorators import error_status, handle_game_errors
from .helpers import get_json_body, require_field, to_payload

__all__ = ['game_logger', 'error_status', 'handle_game_errors', 'get_json_body', 'require_field', 'to_payload']
