"""
Error taxonomy for the API.

Every error is an HTTPException so FastAPI and the global handlers in
``lessonbook.main`` render it as ``{"message": ...}`` with its status code.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, token failed"

    def __init__(self, message: str = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidState(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid state transition"


class LessonInUse(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Lesson has payments or requests and cannot be deleted"


class NoActiveSubscription(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No active subscription found"


class PastDate(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Cannot book past dates"


class PaymentIncomplete(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment not completed"


class ServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"


class DatabaseUnavailable(ServerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database not available"
