import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from thrifthub.core.exceptions.app_exception import AppHttpException

HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    502: "GATEWAY_ERROR",
}


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or "request"


async def app_exception_handler(request: Request, exc: AppHttpException):
    return JSONResponse(status_code=exc.status_code, content=exc.content)


async def http_exception_handler(request: Request, exc: HTTPException):
    content = {
        "success": False,
        "error": {"code": HTTP_CODES.get(exc.status_code, "ERROR"), "message": str(exc.detail)},
    }
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value").removeprefix("Value error, ")}
        for error in exc.errors()
    ]
    content = {
        "success": False,
        "error": {"code": "VALIDATION_ERROR", "message": "Validation failed", "details": details},
    }
    return JSONResponse(status_code=400, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logging.exception(f"SYSTEM >>> Unhandled error on {request.method} {request.url.path}: {exc}")
    content = {
        "success": False,
        "error": {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"},
    }
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppHttpException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
