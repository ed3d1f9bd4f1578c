"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import pytest
import os

# Ensure testing environment
os.environ['TESTING'] = '1'
os.environ.setdefault('FLASK_ENV', 'testing')


@pytest.fixture(scope="function", autouse=True)
def reset_global_container():
    """Reset the global container before each test to ensure clean state."""
    from container import reset_container, configure_container
    from config_factory import ConfigurationFactory
    from src.config.game_settings import reset_game_settings

    reset_container()
    reset_game_settings()

    # Reconfigure with the app's socketio so handlers resolve fresh services
    try:
        from app import socketio as app_socketio
        config_factory = ConfigurationFactory()
        config_factory.load_from_environment()
        configure_container(socketio=app_socketio, config=config_factory.to_dict())
    except ImportError:
        pass

    yield




@pytest.fixture(scope="function")
def container():
    """Provide the global service container as app.py wires it."""
    from container import get_container
    return get_container()


@pytest.fixture(scope="function")
def wired_controller():
    """
    Provide (controller, scheduler, emissions) over real services.

    Ticks and resets only run when the test fires the recorded tasks.
    """
    from tests.helpers.room_helpers import build_controller
    from tests.helpers.socket_mocks import MockSocketIOTestHelper
    controller, scheduler, socketio = build_controller()
    return controller, scheduler, MockSocketIOTestHelper(socketio)
