"""
Bank management API entrypoint.

- logging setup and request tracing middleware
- CORS
- exception handlers rendering every error in the ApiResponse envelope
- routers mounted under /api
"""

import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from bank_management.api import accounts, auth, transactions
from bank_management.core.config import CORS_ALLOWED_ORIGINS
from bank_management.core.exceptions import BankError
from bank_management.core.logging_config import get_logger, setup_logging
from bank_management.database import create_db_and_tables, get_session
from bank_management.schemas.common import failure, ok

SERVICE_NAME = "Bank Management API"
SERVICE_VERSION = "1.0.0"

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("%s starting up", SERVICE_NAME)
    yield
    logger.info("%s shutting down", SERVICE_NAME)


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    # bodies are not logged, login forms carry passwords
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "HTTP %s %s from %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        request.client.host if request.client else "?",
        response.status_code,
        elapsed_ms,
    )
    return response


def _envelope(status_code: int, message: str, errors=None, headers=None) -> JSONResponse:
    body = failure(message, errors).model_dump(mode="json", by_alias=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(BankError)
async def bank_error_handler(request: Request, exc: BankError):
    return _envelope(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # drop the "body" / "query" / "path" prefix
        loc = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(loc) or "request"
        errors.append(f"{field}: {error.get('msg')}")
    logger.info("Validation failed for %s %s: %s", request.method, request.url.path, errors)
    return _envelope(400, "Invalid request data", errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(500, "An internal server error occurred")


app.include_router(auth.router, prefix="/api")
app.include_router(accounts.router, prefix="/api")
app.include_router(transactions.router, prefix="/api")


@app.get("/")
def root():
    return ok({"service": SERVICE_NAME, "version": SERVICE_VERSION}, "Service is running")


@app.get("/health")
def health(session: Session = Depends(get_session)):
    try:
        session.connection().execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return _envelope(503, "Database unavailable", ["database: unreachable"])
    return ok({"status": "healthy", "database": "ok"}, "Service is healthy")
