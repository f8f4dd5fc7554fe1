from src.shared.schemas.base import (
    ApiResponse,
    BaseSchema,
    CamelSchema,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "ApiResponse",
    "BaseSchema",
    "CamelSchema",
    "ErrorDetail",
    "ErrorResponse",
]
