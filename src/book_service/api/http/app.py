"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.book_service import __version__
from src.book_service.api.http.app_data import ApplicationDependencies
from src.book_service.api.http.routers.book import router as book_router
from src.book_service.api.http.routers.health import router as health_router
from src.book_service.api.utils.app_startup import configure_logging
from src.book_service.core.services import DbSessionService
from src.book_service.entities.book import BookRepository, BookStore, BookStoreError
from src.book_service.runtime.config.config_data import ConfigData
from src.book_service.runtime.context import get_config

__all__ = ["app", "create_app", "startup", "shutdown"]


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if request.app.state.config.app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }

    start = time.perf_counter()

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
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Exception handlers ---
async def bad_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.bind(errors=exc.errors()).info("request.bad_request")
    return JSONResponse(status_code=400, content={"detail": "Bad Request"})


async def store_error_handler(request: Request, exc: BookStoreError) -> JSONResponse:
    logger.opt(exception=exc).error("Book store failure")
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# --- Lifecycle hooks ---
async def startup(app: FastAPI) -> None:
    config: ConfigData = app.state.config
    logger.info("Starting up application in {} environment", config.app.environment)

    book_store: BookStore | None = app.state.book_store_override
    database_service = None
    if book_store is None:
        database_service = DbSessionService(config.database)
        database_service.create_all()
        book_store = BookRepository(database_service)

    app.state.app_dependencies = ApplicationDependencies(
        book_store=book_store,
        database_service=database_service,
    )


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None and app_dependencies.database_service is not None:
        app_dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


def create_app(
    config: ConfigData | None = None,
    book_store: BookStore | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration to run with; defaults to the current context's.
        book_store: Store to serve books from. When omitted, a database backed
            store is built from ``config.database`` at startup.
    """
    config = config or get_config()
    configure_logging(config)

    production = config.app.environment == "production"
    application = FastAPI(
        title=config.app.name,
        version=__version__,
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    application.state.config = config
    application.state.book_store_override = book_store

    if production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    application.middleware("http")(log_requests)

    application.add_exception_handler(RequestValidationError, bad_request_handler)
    application.add_exception_handler(BookStoreError, store_error_handler)

    application.include_router(health_router)
    application.include_router(book_router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # Request logging middleware covers access logs
    )
