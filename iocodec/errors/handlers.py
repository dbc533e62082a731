"""FastAPI Exception Handlers

Maps CodecValidationException raised by the request pipeline to a 400
response carrying the structured error list.
"""
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from iocodec.logging import pipe_logger


class ValidationErrorModel(BaseModel):
    """One formatted error as it appears in a 400 response."""
    field: str
    message: str
    value: Any = None
    expected: str | None = None
    code: str | None = None
    suggestion: str | None = None


class ValidationErrorResponse(BaseModel):
    """Body of every 400 response produced by codec validation."""
    statusCode: int = 400
    message: str = "Validation failed"
    error: str = "Bad Request"
    errors: list[ValidationErrorModel]


# Usage: @router.post("/users", responses=VALIDATION_RESPONSES)
VALIDATION_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ValidationErrorResponse, "description": "Validation failed"},
}


async def codec_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle CodecValidationException raised in dependencies and route handlers."""
    from iocodec.config import get_settings
    from iocodec.validation.errors import CodecValidationException

    if not isinstance(exc, CodecValidationException):
        raise exc

    content = exc.get_response(include_values=get_settings().INCLUDE_ERROR_VALUES)
    pipe_logger().warning(
        "validation_failed",
        method=request.method,
        path=request.url.path,
        error_count=len(content["errors"]),
        errors=content["errors"],
    )
    return JSONResponse(status_code=exc.status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    """Register the codec error handlers on a FastAPI app.

    Usage:
        from iocodec.errors.handlers import register_error_handlers

        app = FastAPI(...)
        register_error_handlers(app)
    """
    from iocodec.validation.errors import CodecValidationException

    app.add_exception_handler(CodecValidationException, codec_validation_handler)
