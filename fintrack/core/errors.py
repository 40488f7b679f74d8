"""Error taxonomy shared by the services, the store and the HTTP layer."""

from typing import Optional

from fastapi import status


class FintrackError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "field": self.field}


class ValidationError(FintrackError):
    """Malformed or missing input; ``field`` names the offending field."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"

    def __init__(self, field: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"Invalid {field}", field=field)


class NotFound(FintrackError):
    """Absent or not owned by the caller. Both cases look the same."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Unauthorized(FintrackError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InternalError(FintrackError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"
