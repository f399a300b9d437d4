"""Mapping of exceptions to OSB error responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chartbroker.domain.base.exceptions import DomainException
from chartbroker.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, description: str, error: str = "") -> JSONResponse:
    body = {"description": description}
    if error:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, exc.http_status, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return error_response(400, f"invalid request: {problems}", "BadRequest")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
    return error_response(500, str(exc) or type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
