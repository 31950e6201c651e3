from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
import logging

from core.config import settings, validate_settings
from core.database import initialize_db, db_manager
# Import exceptions and handlers
from core.exceptions import (
    APIException,
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)
from routes import health_router, negotiations_router, ws_router
from services.fanout import NotificationFanout
from services.websockets import ConnectionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup event
    logger.info("Validating environment configuration...")
    for warning in validate_settings(settings):
        logger.warning(warning)
    if not settings.SECRET_KEY and not settings.is_local:
        raise RuntimeError("SECRET_KEY must be set outside local mode. Please check your .env file.")

    initialize_db(settings.SQLALCHEMY_DATABASE_URI, settings.is_local)
    if settings.is_local:
        await db_manager.create_tables()

    # The fanout refuses to start without a live push channel.
    push_channel = ConnectionManager()
    app.state.push_channel = push_channel
    app.state.notification_fanout = NotificationFanout(push_channel)
    logger.info("Push channel and notification fanout ready")

    yield
    # Shutdown event
    await app.state.notification_fanout.drain()
    await push_channel.shutdown()
    await db_manager.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Haggle API",
    description="Price negotiation for marketplace products: buyers propose, shops see every outcome.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers with API versioning v1
app.include_router(negotiations_router, prefix="/v1")
app.include_router(health_router, prefix="/v1")

# Include WebSocket router
app.include_router(ws_router)


@app.get("/")
async def read_root():
    return {
        "service": "Haggle API",
        "status": "Running",
        "version": "1.0.0",
    }


# Register exception handlers
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)
