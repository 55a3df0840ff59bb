"""
Numeris - API Backend

Démarre avec:
    uvicorn server:app --host 0.0.0.0 --port 8080
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
from starlette.middleware.cors import CORSMiddleware

from config import Settings, get_settings
from errors import AppError
from repositories import ActivityRepository, InvoiceRepository, UserRepository
from scheduler_service import TaskScheduler
from services.activity_logger import ActivityLogger
from services.passwords import PasswordHasher
from services.tokens import TokenService
from services.validation import field_errors

# Configuration logging
logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("numeris")


# ==================== DATABASE ====================

async def connect_database(settings: Settings) -> AsyncIOMotorClient:
    """Connect and ping, retrying up to settings.db_connect_attempts times."""
    attempt = 0
    while True:
        attempt += 1
        client = AsyncIOMotorClient(
            settings.mongo_url,
            maxPoolSize=settings.db_max_pool_size,
            maxIdleTimeMS=settings.db_max_idle_time_ms,
            serverSelectionTimeoutMS=int(settings.db_timeout_seconds * 1000),
        )
        try:
            await client.admin.command("ping")
            logger.info(f"Connected to MongoDB, database: {settings.db_name}")
            return client
        except PyMongoError as e:
            client.close()
            logger.error(f"cannot connect to database (attempt {attempt}): {e}")
            if attempt >= settings.db_connect_attempts:
                raise
            await asyncio.sleep(settings.db_connect_retry_seconds)


def build_services(app: FastAPI, client, settings: Settings) -> None:
    timeout = settings.db_timeout_seconds
    app.state.db_client = client
    app.state.user_repository = UserRepository(client, settings.db_name, timeout)
    app.state.invoice_repository = InvoiceRepository(client, settings.db_name, timeout)
    app.state.activity_repository = ActivityRepository(client, settings.db_name, timeout)
    app.state.activity_logger = ActivityLogger(app.state.activity_repository, settings.activity_queue_size)
    app.state.password_hasher = PasswordHasher()
    app.state.token_service = TokenService(
        settings.auth_token_key,
        ttl_hours=settings.token_ttl_hours,
        issuer=settings.token_issuer,
    )
    app.state.scheduler = TaskScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if not settings.auth_token_key:
        raise RuntimeError("AUTH_TOKEN_KEY environment variable is required")

    client = await connect_database(settings)
    build_services(app, client, settings)
    await app.state.activity_logger.start()
    app.state.scheduler.start()
    try:
        yield
    finally:
        await app.state.activity_logger.stop()
        app.state.scheduler.shutdown()
        client.close()
        logger.info("Database connection closed")


# ==================== ERRORS ====================

async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "message": "invalid input request received",
            "fields": field_errors(exc.errors()),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": "internal server error"},
    )


# ==================== APP ====================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Numeris",
        description="Invoice management API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization", "Content-Length"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ==================== IMPORT DES ROUTES ====================

    from routes import activities, auth, invoices

    app.include_router(auth.router, prefix="/api")
    app.include_router(invoices.router, prefix="/api")
    app.include_router(activities.router, prefix="/api")

    @app.get("/")
    async def root():
        return {"name": "Numeris API", "version": "1.0.0", "status": "running", "docs": "/docs"}

    return app


app = create_app()
