from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interview_booking.base.exceptions import BookingError, StorageUnavailable
from interview_booking.base.logging_config import error_logger as logger
from interview_booking.base.metrics import api_exception_counter

INTERNAL_ERROR = {"error": "Internal server error", "kind": "InternalError", "status_code": 500}


def register_exception_handlers(app):
    @app.exception_handler(BookingError)
    async def booking_exception_handler(request: Request, exc: BookingError):
        api_exception_counter.labels(type=exc.kind).inc()
        if isinstance(exc, StorageUnavailable) or exc.status_code >= 500:
            logger.error(
                f"[{exc.kind}] {exc.message} | Path={request.url.path}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
            return JSONResponse(status_code=500, content=INTERNAL_ERROR)

        logger.warning(f"[{exc.kind}] {exc.message} | Path={request.url.path}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"[HTTPException] {exc.detail} | Path={request.url.path}")
        api_exception_counter.labels(type="http").inc()
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "status_code": exc.status_code},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"[ValidationError] Path={request.url.path} | {exc.errors()}")
        api_exception_counter.labels(type="validation").inc()
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request parameters", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"[UnhandledError] {request.method} {request.url.path}: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        api_exception_counter.labels(type="unhandled").inc()
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
