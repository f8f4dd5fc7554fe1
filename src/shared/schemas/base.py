from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base Pydantic schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class CamelSchema(BaseSchema):
    """
    Schema read from camelCase JSON (platform API records, dashboard payloads).

    Attributes stay snake_case; fields whose wire name is not plain camelCase
    still declare an explicit alias.
    """

    model_config = ConfigDict(alias_generator=to_camel)


class ErrorDetail(BaseSchema):
    """One problem with a request: a body field, a header or an upstream collection."""

    field: str | None = None
    message: str


class SuccessResponse(BaseSchema, Generic[T]):
    """Envelope for JSON endpoints; the XLSX export streams the file instead."""

    success: bool = True
    data: T
    message: str | None = None


ApiResponse = SuccessResponse


class ErrorResponse(BaseSchema):
    """Body of every error response (4xx and 5xx)."""

    success: bool = False
    data: None = None
    message: str
    errors: list[ErrorDetail] = []
