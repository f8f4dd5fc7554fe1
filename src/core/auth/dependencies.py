from typing import Annotated

from fastapi import Depends, Header

from src.core.exceptions import AuthenticationError


async def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    Dependency to get the caller's bearer token.

    The token is not validated here: it is forwarded to the platform API,
    which authenticates and authorizes every collection request.

    Usage:
        @router.get("/summary")
        async def summary(token: str = Depends(get_bearer_token)):
            ...
    """
    if not authorization:
        raise AuthenticationError("Authorization header required")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise AuthenticationError("Authorization header required")

    return token


# Convenience dependency
BearerToken = Annotated[str, Depends(get_bearer_token)]
