"""Pydantic models shared by the validation engine and the API error responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ValidationIssue(BaseModel):
    """One way a document fails a schema or syntax rule."""

    model_config = ConfigDict(extra="forbid")

    field: str
    message: str
    value: Any = None


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: ErrorDetail
