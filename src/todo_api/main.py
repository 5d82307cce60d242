from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import migrations
from .db import Database
from .errors import SchemaOutOfDateError
from .logging_config import finalize_request_log, new_request_id
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Refuse to serve unless the database is reachable and fully migrated.
    """
    database: Database = app.state.database
    database.connect()
    outstanding = migrations.pending(database)
    if outstanding:
        err = SchemaOutOfDateError(outstanding)
        logger.error("%s", err)
        raise err
    logger.info("Todo API ready (schema revision %s)", migrations.current_revision(database))
    try:
        yield
    finally:
        database.dispose()


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: configuration; read from the environment when omitted.
        database: persistence access; built from `settings.database_url` when omitted.
            The connection is not opened until the app starts.
    """
    settings = settings or get_settings()
    if database is None:
        database = Database(settings.database_url, echo=settings.db_echo)

    app = FastAPI(
        title="Todo API",
        description="REST backend for managing todo items stored in a relational database.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.database = database

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = new_request_id()
        started = time.perf_counter()
        status = 500  # unless a response comes back
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            finalize_request_log(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=status,
                latency_ms=int((time.perf_counter() - started) * 1000),
                client_ip=request.client.host if request.client else None,
            )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for malformed or invalid request bodies.

        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=400,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "DatabaseError", "message": "Database operation failed"},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the database backend in use.
        """
        return {"message": "Healthy", "database": database.backend_name}

    app.include_router(todos_router.router)
    return app
