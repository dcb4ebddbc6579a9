"""Render every error as a JSON body with an ``error`` key."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from estatehub.common.logging import get_logger

logger = get_logger("api.errors")


def _field_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = {"error": exc.detail}
    if exc.status_code >= 500:
        content["message"] = "The request could not be completed; no changes were saved"
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _field_errors(exc)
    logger.info("Rejected %s %s: %d invalid field(s)", request.method, request.url.path, len(details))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid input",
            "details": details,
            "message": ", ".join(f"{'.'.join(d['loc'])}: {d['msg']}" for d in details),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": "An unexpected error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
