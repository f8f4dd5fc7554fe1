from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401)


class FetchError(AppException):
    """One of the upstream collections could not be retrieved; the run is aborted."""

    def __init__(self, collection: str, reason: str | None = None):
        self.collection = collection
        self.reason = reason
        super().__init__(
            message="Failed to fetch report data. Please try again.",
            status_code=502,
            details={"collection": collection},
        )

    def __str__(self) -> str:
        if self.reason:
            return f"Fetching {self.collection} failed: {self.reason}"
        return f"Fetching {self.collection} failed"


class AssemblyError(AppException):
    """A single input record has an unexpected shape (e.g. no timestamp)."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=500, details=details)


class WriteError(AppException):
    """Report workbook could not be serialized or delivered."""

    def __init__(self, message: str | None = None):
        super().__init__(message=message or "Failed to write report file", status_code=500)
