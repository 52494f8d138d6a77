from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wholesale.api.api_v1.api import api_router
from wholesale.core.config import settings
from wholesale.core.exceptions import ValidationError, WholesaleError
from wholesale.core.logging_config import setup_logging, get_logger
from wholesale.db.init_db import ensure_tables_exist

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application start-up and shutdown"""
    setup_logging(settings.LOG_LEVEL)
    logger.info("🚀 Starting up...")

    await ensure_tables_exist()
    logger.info("📊 Database tables ready")

    yield
    logger.info("🛑 Shutting down...")


async def wholesale_error_handler(request: Request, exc: WholesaleError) -> JSONResponse:
    """Domain errors go back verbatim with their diagnostics"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.to_dict()}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.to_dict()}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies use the same error shape as the ordering core"""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    error = ValidationError("Malformed request", errors=errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        description="Wholesale ordering - tiered pricing and credit ledger",
        lifespan=lifespan
    )

    if settings.BACKEND_CORS_ORIGINS:
        logger.info(f"CORS origins: {settings.BACKEND_CORS_ORIGINS}")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(WholesaleError, wholesale_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
