from http import HTTPStatus

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from geoip_service.logger import logger
from geoip_service.models.response_models import ErrorResponse


def error_response(status_code: int, error: str, message: str | None = None, headers: dict | None = None) -> JSONResponse:
    """Build the `{"error": ..., "message": ...}` body used by every failing request."""
    payload = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def _default_error_code(status_code: int) -> str:
    """Derive a snake_case code such as `not_found` from an HTTP status."""
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "http_error"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Flatten HTTPException details into the service's error body.

    Route handlers raise HTTPException with `detail={"error": ..., "message": ...}`;
    framework-raised ones (404, 405) only carry a string and get a derived code.
    """
    headers = getattr(exc, "headers", None)
    if isinstance(exc.detail, dict):
        return error_response(
            exc.status_code,
            str(exc.detail.get("error") or _default_error_code(exc.status_code)),
            exc.detail.get("message"),
            headers,
        )
    return error_response(exc.status_code, _default_error_code(exc.status_code), str(exc.detail), headers)


async def pydantic_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Malformed or wrongly typed JSON bodies are reported as `invalid_request`.

    Internal validation details are not exposed to clients.
    """
    logger.error(
        "Failed to decode request "
        f"path={request.url.path} method={request.method} errors={exc.errors()}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "invalid_request", "Invalid JSON format")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors to return a structured 500 response."""
    logger.exception(
        "Unhandled exception while processing request: "
        f"{repr(exc)} path={request.url.path} method={request.method}"
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred while processing the request.",
    )
