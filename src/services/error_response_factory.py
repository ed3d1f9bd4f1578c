"""
Error Response Factory for Starship Saboteur

Provides standardized error response creation functionality, and the
decorator that turns handler exceptions into error events.
"""

import logging
import traceback
from functools import wraps
from typing import Dict, Optional

from src.core.errors import ErrorCode, ValidationError
from flask_socketio import emit

logger = logging.getLogger(__name__)


class ErrorResponseFactory:
    """Factory responsible for creating standardized error responses."""

    def create_error_response(self, code: ErrorCode, message: str, details: Optional[Dict] = None) -> Dict:
        """
        Create standardized error response.

        Args:
            code: Error code enum
            message: Human-readable error message
            details: Optional additional error details

        Returns:
            Standardized error response
        """
        return {
            "success": False,
            "error": {
                "code": code.value,
                "kind": code.kind.value,
                "message": message,
                "details": details or {}
            }
        }

    def emit_error(self, code: ErrorCode, message: str, details: Optional[Dict] = None):
        """
        Emit standardized error response to the requesting client.

        Args:
            code: Error code enum
            message: Human-readable error message
            details: Optional additional error details
        """
        error_response = self.create_error_response(code, message, details)

        logger.warning(f"Emitting error: {code.value} - {message}")
        emit('error', error_response)

    def emit_validation_error(self, error: ValidationError):
        """
        Emit validation error response to client.

        Args:
            error: ValidationError instance
        """
        self.emit_error(error.code, error.message, error.details)

    def handle_exception(self, e: Exception, context: str = "Unknown") -> tuple[ErrorCode, str]:
        """
        Handle unexpected exceptions and return appropriate error code and message.

        Args:
            e: Exception instance
            context: Context where the exception occurred

        Returns:
            Tuple of (error_code, error_message)
        """
        if isinstance(e, ValidationError):
            return e.code, e.message

        # Log the full exception for debugging
        logger.error(f"Unexpected exception in {context}: {str(e)}")
        logger.error(f"Exception traceback: {traceback.format_exc()}")

        # Return generic internal error
        return ErrorCode.INTERNAL_ERROR, "An internal error occurred"


def with_error_handling(func):
    """
    Decorator for Socket.IO event handlers to provide consistent error handling.

    ValidationErrors become an `error` event for the requesting client; anything
    else is logged and reported as INTERNAL_ERROR. The connection stays open.

    Args:
        func: Socket.IO event handler function

    Returns:
        Wrapped function with error handling
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            factory = ErrorResponseFactory()
            factory.emit_validation_error(e)
        except Exception as e:
            factory = ErrorResponseFactory()
            error_code, error_message = factory.handle_exception(e, func.__name__)
            factory.emit_error(error_code, error_message)

    return wrapper
