"""
FastAPI application entry point.
Sets up the API with lifespan events that build the registry and
upload service, and tear them down on shutdown.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from app.config import settings
from app.database import create_engine, create_session_factory, init_db
from app.api.router import api_router
from app.middleware.metrics_middleware import MetricsMiddleware
from app.repositories.file_registry import FileRegistry
from app.services.upload_service import UploadSessionService
from app.storage.credentials import CredentialIssuer
from app.storage.s3_client import ObjectStorageClient
from app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: create tables, build registry, storage client and service
    - Shutdown: dispose the database engine
    """
    # Configure structured JSON logging
    configure_logging('earlbox-api', settings.log_level)

    engine = create_engine(settings.database_url)
    await init_db(engine)

    registry = FileRegistry(create_session_factory(engine))
    storage = ObjectStorageClient(settings)
    issuer = CredentialIssuer(storage, expiration=settings.upload_url_expiration)

    app.state.registry = registry
    app.state.upload_service = UploadSessionService(
        registry=registry,
        issuer=issuer,
        storage=storage,
        max_upload_bytes=settings.max_upload_bytes,
        verify_uploads=settings.verify_uploads,
    )
    logger.info(f"Earl Box API started (environment={settings.environment})")

    yield

    await engine.dispose()
    logger.info("Earl Box API shut down")


# Create FastAPI app
app = FastAPI(
    title="Earl Box API",
    description="Direct-to-storage file uploads with shareable links",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware (browser uploads come from the front end origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Earl Box API",
        "version": VERSION,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
