"""Response envelopes shared across endpoints."""

from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Machine-readable error code plus human message and any details."""

    model_config = ConfigDict(extra="allow")

    code: str = Field(..., description="Error code, e.g. NOT_FOUND")
    message: str = Field(..., description="Human-readable message")


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    error: ErrorDetail


# OpenAPI documentation for the errors every authenticated route can return
ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Missing or invalid identity token"},
    403: {"model": ErrorResponse, "description": "Caller lacks the required room role"},
    404: {
        "model": ErrorResponse,
        "description": "Room, code, member or profile not found",
    },
    422: {"model": ErrorResponse, "description": "Invalid input"},
}
