"""
Socket Event Router Unit Tests

Tests for the SocketEventRouter class and its core routing functionality,
including event routing, middleware execution and Socket.IO binding.
"""

import pytest
from unittest.mock import Mock, patch

from src.handlers.socket_event_router import (
    SocketEventRouter,
    EventRouteNotFoundError,
    get_router,
    setup_router,
    request_logging_middleware
)


@pytest.fixture(autouse=True)
def mock_request():
    with patch('src.handlers.socket_event_router.request', new=Mock(sid='sid-test')) as request:
        yield request


class TestSocketEventRouter:
    """Test SocketEventRouter core functionality"""

    def setup_method(self):
        """Setup test fixtures for each test"""
        self.router = SocketEventRouter()

    def test_register_route(self):
        """Test route registration"""
        def test_handler(data):
            return "test_response"

        self.router.register_route("test_event", test_handler)

        assert self.router.has_route("test_event")
        assert not self.router.has_route("nonexistent_event")
        assert self.router.get_registered_events() == ["test_event"]

    def test_route_decorator(self):
        """Test route decorator functionality"""
        @self.router.route("decorated_event")
        def decorated_handler(data):
            return "decorated_response"

        assert self.router.has_route("decorated_event")
        assert self.router.handle_event("decorated_event", {}) == "decorated_response"

    def test_handle_event_passes_data(self):
        handler = Mock(return_value='ok', __name__='handler')
        self.router.register_route('castVote', handler)

        assert self.router.handle_event('castVote', {'targetId': 'sid-2'}) == 'ok'
        handler.assert_called_once_with({'targetId': 'sid-2'})

    def test_unknown_event_raises(self):
        with pytest.raises(EventRouteNotFoundError):
            self.router.handle_event('warpDrive', {})

    def test_middleware_runs_in_order(self):
        calls = []

        def first(event_name, data):
            calls.append('first')
            return {'stage': 1}

        def second(event_name, data):
            calls.append(('second', data))
            return None

        handler = Mock(__name__='handler')
        self.router.add_middleware(first)
        self.router.add_middleware(second)
        self.router.register_route('sendChat', handler)

        self.router.handle_event('sendChat', {'message': 'hi'})

        assert calls == ['first', ('second', {'stage': 1})]
        handler.assert_called_once_with({'stage': 1})

    def test_register_with_socketio(self):
        socketio = Mock()
        handler = Mock(return_value='done', __name__='handler')
        self.router.register_route('startGame', handler)

        self.router.register_with_socketio(socketio)

        event_name, bound = socketio.on_event.call_args[0]
        assert event_name == 'startGame'
        assert bound.__name__ == 'on_startGame'
        assert bound() == 'done'
        handler.assert_called_once_with(None)


class TestRouterSetup:
    """Test the module level router helpers"""

    def test_setup_router_installs_logging_middleware(self):
        router = setup_router()

        assert get_router() is router
        assert router._middleware == [request_logging_middleware]

    def test_logging_middleware_passes_data_through(self):
        assert request_logging_middleware('joinRoom', {'roomId': 'ABCDE'}) == {'roomId': 'ABCDE'}
        assert request_logging_middleware('startGame', None) is None
