"""
Error Response Factory Unit Tests
"""

from unittest.mock import patch

from src.core.errors import ErrorCode, ErrorKind, ValidationError
from src.services.error_response_factory import ErrorResponseFactory, with_error_handling


class TestErrorCodes:

    def test_every_code_has_a_kind(self):
        for code in ErrorCode:
            assert isinstance(code.kind, ErrorKind)

    def test_kind_mapping(self):
        assert ErrorCode.ROOM_NOT_FOUND.kind is ErrorKind.NOT_FOUND
        assert ErrorCode.GAME_ALREADY_STARTED.kind is ErrorKind.INVALID_STATE
        assert ErrorCode.ROOM_FULL.kind is ErrorKind.CAPACITY
        assert ErrorCode.INVALID_SYSTEM.kind is ErrorKind.INVALID_INPUT
        assert ValidationError(ErrorCode.NO_SECRET_USES, 'none').kind is ErrorKind.INVALID_STATE


class TestErrorResponseFactory:
    """Test response creation"""

    def setup_method(self):
        self.factory = ErrorResponseFactory()

    def test_create_error_response(self):
        response = self.factory.create_error_response(ErrorCode.INVALID_TARGET, 'Invalid target player')

        assert response == {
            'success': False,
            'error': {
                'code': 'INVALID_TARGET',
                'kind': 'NOT_FOUND',
                'message': 'Invalid target player',
                'details': {}
            }
        }

    def test_handle_exception(self):
        assert self.factory.handle_exception(ValidationError(ErrorCode.ROOM_FULL, 'full')) == (ErrorCode.ROOM_FULL, 'full')
        code, message = self.factory.handle_exception(RuntimeError('boom'), 'test')
        assert code == ErrorCode.INTERNAL_ERROR
        assert message == 'An internal error occurred'


class TestWithErrorHandling:
    """Test the handler decorator"""

    @patch('src.services.error_response_factory.emit')
    def test_validation_error_is_emitted(self, mock_emit):
        @with_error_handling
        def handler():
            raise ValidationError(ErrorCode.GAME_NOT_STARTED, 'The game has not started yet')

        assert handler() is None

        event, payload = mock_emit.call_args[0]
        assert event == 'error'
        assert payload['error']['code'] == 'GAME_NOT_STARTED'
        assert payload['error']['kind'] == 'INVALID_STATE'

    @patch('src.services.error_response_factory.emit')
    def test_unexpected_error_becomes_internal_error(self, mock_emit):
        @with_error_handling
        def handler():
            raise KeyError('boom')

        handler()

        payload = mock_emit.call_args[0][1]
        assert payload['error']['code'] == 'INTERNAL_ERROR'

    @patch('src.services.error_response_factory.emit')
    def test_success_passes_through(self, mock_emit):
        @with_error_handling
        def handler(value):
            return value * 2

        assert handler(21) == 42
        assert handler.__name__ == 'handler'
        mock_emit.assert_not_called()
