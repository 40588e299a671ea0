# User value: This file serves document translation over HTTP with consistent error reporting.
# app.py
import os
import logging
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.json_logging import configure_json_logging

# Load env before importing modules that read os.getenv at import time.
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))


def configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    configure_json_logging(service="doc-translate-api", level=level)


configure_logging()
logger = logging.getLogger("translator.api.error")

from services.errors import TranslationWorkflowError
from startup_env import validate_startup_env
from utils.request_id import REQUEST_ID_HEADER, get_request_id, normalize_request_id, request_context

from routes.health import router as health_router
from routes.translate import router as translate_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    validate_startup_env()
    yield


app = FastAPI(title="Document Translate API", lifespan=lifespan)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = normalize_request_id(request.headers.get(REQUEST_ID_HEADER))
    started = time.perf_counter()
    status_code = 500
    with request_context(request_id):
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 500))
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = (time.perf_counter() - started) * 1000.0
            logger.info(
                "http_request method=%s path=%s status=%s duration_ms=%.1f",
                request.method.upper(),
                request.url.path,
                status_code,
                duration_ms,
            )


def _extract_error_message(detail) -> str:
    if isinstance(detail, dict):
        return str(detail.get("error_message") or detail.get("message") or detail.get("detail") or detail)
    if isinstance(detail, list):
        return "; ".join(str(x) for x in detail)
    return str(detail)


def _to_error_code(status_code: int, detail) -> str:
    if isinstance(detail, dict) and detail.get("error_code"):
        return str(detail.get("error_code")).strip().upper()
    if status_code == 404:
        return "RESOURCE_NOT_FOUND"
    if status_code == 400:
        return "INVALID_REQUEST"
    return f"HTTP_{status_code}"


def _error_body(*, request: Request, status_code: int, detail, error_message: str | None = None) -> dict:
    request_id = get_request_id() or normalize_request_id(request.headers.get(REQUEST_ID_HEADER))
    return {
        "error_code": _to_error_code(status_code, detail),
        "error_message": error_message or _extract_error_message(detail),
        "detail": detail,
        "path": request.url.path,
        "request_id": request_id,
    }


def _failure_response(request: Request, status_code: int, body: dict, event: str) -> JSONResponse:
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "%s status=%s path=%s request_id=%s error_code=%s error_message=%s",
        event,
        status_code,
        request.url.path,
        body["request_id"],
        body["error_code"],
        body["error_message"],
    )
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = _error_body(
        request=request,
        status_code=422,
        detail=exc.errors(),
        error_message="Request validation failed",
    )
    body["error_code"] = "VALIDATION_ERROR"
    return _failure_response(request, 422, body, "request_failed_validation")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = _error_body(request=request, status_code=exc.status_code, detail=exc.detail)
    return _failure_response(request, exc.status_code, body, "request_failed")


@app.exception_handler(TranslationWorkflowError)
# User value: tells callers which translation stage failed and whether staged files leaked.
async def translation_exception_handler(request: Request, exc: TranslationWorkflowError):
    body = _error_body(
        request=request,
        status_code=exc.http_status,
        detail={"error_code": exc.error_code},
        error_message=exc.message,
    )
    body["cleanup_error"] = str(exc.cleanup_error) if exc.cleanup_error else None
    return _failure_response(request, exc.http_status, body, "translation_failed")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "request_failed_unhandled path=%s error=%s: %s",
        request.url.path,
        exc.__class__.__name__,
        exc,
    )
    body = _error_body(
        request=request,
        status_code=500,
        detail="Unhandled server exception",
        error_message="Internal server error",
    )
    body["error_code"] = "INTERNAL_SERVER_ERROR"
    return JSONResponse(status_code=500, content=body)


app.include_router(health_router)
app.include_router(translate_router)
