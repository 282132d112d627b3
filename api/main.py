from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import Settings
from core.db import Database
from core.errors import AppError, FieldError, ValidationError
from core.logging_config import setup_logging
from core.store import Store
from posts import repository as posts_repository
from posts import router as posts_router
from users import repository as users_repository
from users import router as users_router

logger = logging.getLogger(__name__)


def create_memory_store() -> Store:
    return Store(
        users=users_repository.InMemoryUserStore(),
        posts=posts_repository.InMemoryPostStore(),
    )


async def open_postgres_store(database: Database) -> Store:
    await database.init()
    # users first: posts.posted_by references it.
    await users_repository.create_schema(database)
    await posts_repository.create_schema(database)
    return Store(
        users=users_repository.PostgresUserStore(database),
        posts=posts_repository.PostgresPostStore(database),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Database | None = None
    owns_store = app.state.store is None

    if owns_store:
        if settings.in_memory:
            logger.warning("DATABASE_URL is not set or USE_IN_MEMORY_STORE is on; using in-memory store.")
            app.state.store = create_memory_store()
        else:
            database = Database(settings.database_url)
            app.state.store = await open_postgres_store(database)
            logger.info("Connected to PostgreSQL.")
    try:
        yield
    finally:
        if database is not None:
            await database.close()
        if owns_store:
            app.state.store = None


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            message=str(err.get("msg") or "Invalid value."),
        )
        for err in exc.errors()
    ]
    error = ValidationError(errors=errors)
    return JSONResponse(status_code=error.status_code, content=error.payload())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="social-api", lifespan=lifespan)
    app.state.settings = settings
    # An injected store is used as-is; otherwise the lifespan builds one.
    app.state.store = store

    # Allow local frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(users_router.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
    app.include_router(posts_router.router, prefix=f"{settings.api_prefix}/posts", tags=["posts"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "social api"}

    return app


app = create_app()
