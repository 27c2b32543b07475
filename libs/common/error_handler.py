"""Global exception handlers.

Every error leaves the API as JSON with a ``message`` field:

- ``HTTPException``          -> its status code, ``{"message": detail}``
- request validation errors  -> 400, ``{"message": "Validation failed", "errors": [...]}``
- anything else              -> 500, ``{"message": "Server error"}`` (+ ``error`` outside production)
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        # Starlette's default for unmatched routes
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": "Route not found",
                "path": request.url.path,
                "method": request.method,
            },
        )

    content = (
        exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"message": "Validation failed", "errors": errors}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    content = {"message": "Server error"}
    if get_settings().ENVIRONMENT != "production":
        content["error"] = str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error responders on an app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
