"""
Common utilities for API routes.

Provides helper functions to reduce boilerplate in route handlers and
exception handlers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from issue_tracker.schemas.common import ErrorResponse


def error_response(status_code: int, messages: Iterable[str]) -> JSONResponse:
    """
    Build the standard failure body.

    Usage:
        return error_response(404, ["Issue not found: abc"])
    """
    body = ErrorResponse(errors=list(messages))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def result_response(
    result: BaseModel | list[BaseModel],
    success: bool,
) -> Any:
    """
    Return a service result as-is on success, or the same body with a 400 on failure.

    Service results already carry `success` and `errors`, so failures keep the
    per-item detail instead of collapsing to a single message.
    """
    if success:
        return result
    if isinstance(result, list):
        content: Any = [item.model_dump() for item in result]
    else:
        content = result.model_dump()
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)
