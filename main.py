"""
Absurdle Game Server - Main Entry Point

This is the main entry point for the Absurdle game server.
It creates the application, starts the expiry sweep and runs Flask-SocketIO.
"""

import threading
import time
from absurdle import create_app
from absurdle.config import get_config
from absurdle.utils.game_logger import game_logger


def expiry_sweep_worker(store, interval_seconds):
    """
    Background worker that periodically drops expired sessions and duels.
    Expired records already read as absent; this only reclaims their memory.
    """
    print("Expiry sweep worker started")
    while True:
        try:
            removed = store.sweep_expired()
            if removed > 0:
                game_logger.logger.info(f"Expiry sweep: Removed {removed} expired records")
        except Exception as e:
            game_logger.logger.error(f"Error in expiry sweep worker: {e}")

        time.sleep(interval_seconds)


def main():
    """Main function to initialize services and start the server."""
    try:
        app_config = get_config()
        print(f"Creating Flask application ({app_config.__name__})...")
        app, socketio = create_app(app_config)
        print("✓ Flask application and services created successfully")

        sweep_thread = threading.Thread(
            target=expiry_sweep_worker, args=(app.store, app_config.SWEEP_INTERVAL_SECONDS), daemon=True
        )
        sweep_thread.start()
        print(f"✓ Expiry sweep worker started - checking every {app_config.SWEEP_INTERVAL_SECONDS} seconds")

        game_logger.logger.info("Absurdle Server Starting")

        print(f"\nStarting Absurdle Game Server on {app_config.HOST}:{app_config.PORT}")
        print(f"Debug mode: {app_config.DEBUG}")
        print(f"Default mode: {app_config.DEFAULT_MODE}")
        print("=" * 50)

        socketio.run(app, host=app_config.HOST, port=app_config.PORT, debug=app_config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Absurdle Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
