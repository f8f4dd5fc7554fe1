from src.core.auth.dependencies import BearerToken, get_bearer_token

__all__ = [
    "BearerToken",
    "get_bearer_token",
]
