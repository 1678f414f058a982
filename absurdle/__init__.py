"""
Absurdle Game Server Application Package

This package contains the adversarial Wordle server: single-player sessions
in fixed or adaptive mode and the real-time two-player duel.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use

    Returns:
        Tuple of (Flask application, SocketIO server) with all services initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*", logger=False, engineio_logger=False)

    # Initialize services over one shared record store
    from .config.game_settings import load_word_list
    from .services.store import TTLStore
    from .services.notifier import SocketIONotifier
    from .services.game_service import initialize_game_service
    from .services.lobby_service import initialize_lobby_service
    from .services.duel_service import initialize_duel_service

    word_list = load_word_list(app.config['WORDS'])
    store = TTLStore()

    initialize_game_service(store, word_list, app.config['MAXIMUM_TRIALS'], app.config['SESSION_TIMEOUT_MINUTES'])
    lobby_service = initialize_lobby_service()
    initialize_duel_service(store, lobby_service, word_list, SocketIONotifier(socketio),
                            app.config['MAXIMUM_TRIALS'], app.config['SESSION_TIMEOUT_MINUTES'])

    # Register blueprints
    from .controllers.game_controller import game_bp
    from .controllers.duel_controller import duel_bp

    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(duel_bp, url_prefix='/api')

    # Register WebSocket handlers
    from .websocket.handlers import register_websocket_handlers
    register_websocket_handlers(socketio)

    # Store shared instances for use in other modules
    app.socketio = socketio
    app.store = store

    return app, socketio
