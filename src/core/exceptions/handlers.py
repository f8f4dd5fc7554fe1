import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.exceptions import AppException, FetchError
from src.shared.schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _error_json(status_code: int, message: str, errors: list[ErrorDetail]) -> JSONResponse:
    response = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=response.model_dump())


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle application exceptions.

    Upstream failures keep their reason in the log only; the client gets the
    generic message and the name of the collection that failed.
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)

    if isinstance(exc, FetchError):
        field = exc.collection
    else:
        field = exc.details.get("field")
    return _error_json(exc.status_code, exc.message, [ErrorDetail(field=field, message=exc.message)])


def _format_validation_errors(errors: list[dict]) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for error in errors:
        loc = error.get("loc", ())
        # "body.salesTrend.0.date" -> "salesTrend.0.date"
        if loc and loc[0] in ("body", "header"):
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) if loc else None
        details.append(ErrorDetail(field=field, message=error.get("msg", "Invalid value")))
    return details


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed export requests (stats and series from the dashboard)."""
    return _error_json(422, "Validation error", _format_validation_errors(exc.errors()))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions (unknown routes, wrong methods)."""
    message = str(exc.detail) if exc.detail else "HTTP error"
    return _error_json(exc.status_code, message, [ErrorDetail(message=message)])
