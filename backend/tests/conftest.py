"""
Test configuration and fixtures.
The registry runs on a throwaway SQLite file per test (aiosqlite);
presigned URLs are generated offline by boto3 with dummy credentials.
"""
import os

# Set test environment before any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./earlbox_test.db"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from typing import AsyncGenerator

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.config import Settings
from app.database import create_engine, create_session_factory, init_db
from app.repositories.file_registry import FileRegistry
from app.services.upload_service import UploadSessionService
from app.storage.credentials import CredentialIssuer
from app.storage.s3_client import ObjectStorageClient


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a fake S3 endpoint and a temporary database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        environment="test",
        storage_endpoint="http://localhost:9000",
        storage_bucket="earlbox-test",
        storage_access_key="test-access-key",
        storage_secret_key="test-secret-key",
        storage_region="us-east-1",
        storage_public_url="https://files.example.com",
    )


@pytest_asyncio.fixture
async def registry(test_settings: Settings) -> AsyncGenerator[FileRegistry, None]:
    """File registry backed by a fresh SQLite database."""
    engine = create_engine(test_settings.database_url)
    await init_db(engine)

    yield FileRegistry(create_session_factory(engine))

    await engine.dispose()


@pytest.fixture
def storage(test_settings: Settings) -> ObjectStorageClient:
    return ObjectStorageClient(test_settings)


@pytest.fixture
def issuer(storage: ObjectStorageClient) -> CredentialIssuer:
    return CredentialIssuer(storage, expiration=3600)


@pytest.fixture
def upload_service(
    registry: FileRegistry,
    issuer: CredentialIssuer,
    storage: ObjectStorageClient,
) -> UploadSessionService:
    return UploadSessionService(registry=registry, issuer=issuer, storage=storage)


def get_test_app(upload_service: UploadSessionService, registry: FileRegistry) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    from app.main import app
    from app.api.dependencies import get_upload_service, get_registry

    app.dependency_overrides[get_upload_service] = lambda: upload_service
    app.dependency_overrides[get_registry] = lambda: registry

    return app


@pytest_asyncio.fixture
async def client(
    upload_service: UploadSessionService,
    registry: FileRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = get_test_app(upload_service, registry)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()
