from src.core.exceptions.base import (
    AppException,
    AuthenticationError,
    FetchError,
    AssemblyError,
    WriteError,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "FetchError",
    "AssemblyError",
    "WriteError",
]
