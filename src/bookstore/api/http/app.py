"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

from src.bookstore import __version__
from src.bookstore.api.http.app_data import ApplicationDependencies
from src.bookstore.api.http.routers.books import router as books_router
from src.bookstore.api.http.routers.health import router as health_router
from src.bookstore.api.utils.app_startup import configure_logging
from src.bookstore.core.errors import BookstoreError, StartupError
from src.bookstore.runtime.context import get_config
from src.bookstore.runtime.init_db import connect_database, init_db

# Initialize logging
configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts) or "Invalid request"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookstoreError)
    async def bookstore_error_handler(request: Request, exc: BookstoreError):
        if exc.status_code >= 500:
            logger.bind(error_type=type(exc).__name__).error(
                "Request failed: {}", exc.message
            )
        else:
            logger.bind(error_type=type(exc).__name__).info(
                "Request rejected: {}", exc.message
            )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    # Undecodable bodies answer 400, not FastAPI's 422
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_error(exc)
        logger.info("Request body rejected: {}", message)
        return PlainTextResponse(message, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail), status_code=exc.status_code, headers=exc.headers
        )


def _register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        xff = request.headers.get("x-forwarded-for")
        client_ip = (
            xff.split(",")[0].strip()
            if xff
            else request.client.host
            if request.client
            else "unknown"
        )

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }

        start = time.perf_counter()

        # Everything that logs within this block inherits base_ctx
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)

                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

                response.headers.setdefault("X-Request-ID", request_id)
                return response

            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return PlainTextResponse(
                    "Internal Server Error",
                    status_code=500,
                    headers={"X-Request-ID": request_id},
                )


# --- Lifecycle hooks ---
async def startup(app: FastAPI, migrate: bool | None = None) -> None:
    """Connect to the database and publish the dependencies on ``app.state``.

    ``migrate`` overrides ``database.migrate_on_startup``. Any failure is
    fatal: the error propagates and the server never starts serving.
    """
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    try:
        database_service = await run_in_threadpool(connect_database, config)
        run_migration = (
            config.database.migrate_on_startup if migrate is None else migrate
        )
        if run_migration:
            await run_in_threadpool(init_db, database_service)
    except StartupError as e:
        logger.error("Startup failed: {}", e)
        raise
    except BookstoreError as e:
        logger.error("Startup failed: {}", e)
        raise StartupError(str(e)) from e

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()
        app.state.app_dependencies = None


def create_app(migrate: bool | None = None) -> FastAPI:
    """Build the application; ``migrate`` forces the startup schema migration on or off."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup(app, migrate=migrate)
        try:
            yield
        finally:
            await shutdown(app)

    config = get_config()
    production = config.app.environment == "production"

    application = FastAPI(
        title="Bookstore API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    application.state.app_dependencies = None

    application.add_middleware(SecurityHeadersMiddleware)

    if production and config.app.cors.allow_credentials and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    _register_request_logging(application)
    _register_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(books_router)

    return application


app = create_app()

__all__ = ["app", "create_app", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
