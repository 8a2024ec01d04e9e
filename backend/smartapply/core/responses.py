"""Response envelope models: {"data": ...} for success, {"error": {...}} for failures."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Standard response envelope for single resources.

    All success responses use the {"data": ...} envelope.

    Usage:
        @router.get("/profile")
        async def get_profile(...) -> DataResponse[dict]:
            return DataResponse(data=profile.to_storage_dict())
    """

    data: T


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        details: Optional list of field-level errors (for validation).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    All errors use the {"error": {...}} envelope.
    """

    error: ErrorDetail
