"""Response envelope shared by every endpoint."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform ``{code, message, data}`` response body."""

    code: str = "SUCCESS"
    message: str = "Request processed successfully"
    data: T


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    code: str
    message: str
    data: dict[str, Any] = {}
