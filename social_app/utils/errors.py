"""Domain errors raised by services and rendered by the API layer."""

from fastapi import status


class AppError(Exception):

    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(AppError):

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):

    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):

    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Missing record, or one the caller is not allowed to see."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
