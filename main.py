from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.router import router as api_router
from core.config import config
from core.db import engine
from core.exceptions.base import CustomException, TransientStorageException
from core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    logger.info(f"Starting {config.APP_NAME}...")
    yield
    logger.info(f"Shutting down {config.APP_NAME}...")
    await engine.dispose()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Business Directory",
        description="Directory of organizations and the people affiliated with them",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CustomException)
    async def custom_exception_handler(
        request: Request, exc: CustomException
    ) -> JSONResponse:
        if isinstance(exc, TransientStorageException):
            logger.error(
                f"{exc.error_code} on {request.method} {request.url.path}: "
                f"{exc.__cause__!r}"
            )
        else:
            logger.warning(f"CustomException: {exc.error_code} - {exc.message}")
        return JSONResponse(
            status_code=exc.code,
            content={
                "error_code": exc.error_code,
                "message": exc.message,
                "data": exc.data,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__} - {exc}"
        )
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An internal server error occurred",
                "detail": str(exc) if config.DEBUG else None,
            },
        )

    @app.get("/health")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "app_name": config.APP_NAME,
        }

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
