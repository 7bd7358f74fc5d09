"""Custom exception hierarchy for the Contudo API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    """Raised for missing or malformed input."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="VALIDATION_ERROR", status_code=400)


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} não encontrada", code="NOT_FOUND", status_code=404)
