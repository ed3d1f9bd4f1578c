"""
Starship Saboteur - A multiplayer social-deduction game aboard a failing spaceship.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

from flask import Flask
from flask_socketio import SocketIO
import os
import logging
import atexit
import sys
import yaml

from src.content_manager import ContentValidationError
from container import configure_container
from config_factory import load_config, ConfigurationFactory

# Initialize Flask app
app = Flask(__name__)

# Load and apply configuration
app_config = load_config()
config_factory = ConfigurationFactory()
app.config.update(config_factory.get_flask_config())

# Initialize Socket.IO with environment-aware CORS
# In production, restrict to explicitly allowed origins from env var SOCKETIO_CORS_ALLOWED_ORIGINS (comma-separated)
allowed_origins_env = os.environ.get('SOCKETIO_CORS_ALLOWED_ORIGINS', '')
if app_config.is_production:
    _cors_allowed = [o.strip() for o in allowed_origins_env.split(',') if o.strip()]
    socketio = SocketIO(app, cors_allowed_origins=_cors_allowed or [], async_mode='eventlet')
else:
    # Development/testing: permissive for local workflows
    socketio = SocketIO(app, cors_allowed_origins="*", async_mode='eventlet')

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configure service container with dependencies
container = configure_container(socketio=socketio, config=config_factory.to_dict())

# Load ship content on startup; the game cannot run without it
try:
    content_manager = container.get('ContentManager')
    logger.info(f"Loaded ship content from {content_manager.yaml_file_path}")
except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
    logger.critical(f"FATAL: Ship content validation failed, which is critical for game play. Server shutting down. Error: {e}")
    sys.exit(1)

controller = container.get('RoomLifecycleController')

# Register Socket.IO handlers
from src.handlers.socket_handlers import register_socket_handlers
handler_config = {
    'app_config': app_config,
    'allowed_origins_env': allowed_origins_env
}
register_socket_handlers(socketio, handler_config)


def cleanup_on_exit():
    """Cancel every running room task on application exit."""
    logger.info("Shutting down Starship Saboteur server...")
    for room_id in controller.room_registry.all_ids():
        room = controller.room_registry.find(room_id)
        if room is not None:
            controller.tick_simulator.cancel(room)
            if room.reset_task is not None:
                room.reset_task.cancel()


atexit.register(cleanup_on_exit)

if __name__ == '__main__':
    logger.info(f"Starting Starship Saboteur server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        cleanup_on_exit()
