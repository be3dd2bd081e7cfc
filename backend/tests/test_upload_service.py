"""
Tests for the upload session service.
"""
import re
from unittest.mock import MagicMock, patch

import pytest

from app.config import MAX_UPLOAD_BYTES, Settings
from app.repositories.file_registry import FileRegistry, RegistryUnavailableError
from app.services.errors import UploadErrorCode
from app.services.upload_service import UploadSessionService, DEFAULT_CONTENT_TYPE
from app.storage.credentials import CredentialIssuer
from app.storage.identifiers import new_upload_identifiers
from app.storage.s3_client import ObjectStorageClient, StorageUnavailableError

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


class TestRequestUpload:
    """Tests for UploadSessionService.request_upload."""

    @pytest.mark.asyncio
    async def test_request_upload_success(self, upload_service: UploadSessionService):
        ticket, error = await upload_service.request_upload("report.pdf", "application/pdf", 512000)

        assert error is None
        assert URL_SAFE.match(ticket.slug)
        assert ticket.object_key.endswith("report.pdf")
        assert ticket.upload_url.startswith("http://localhost:9000/earlbox-test/")
        assert ticket.expires_in == 3600

    @pytest.mark.asyncio
    async def test_request_upload_writes_nothing(
        self,
        upload_service: UploadSessionService,
        registry: FileRegistry
    ):
        for _ in range(3):
            await upload_service.request_upload("report.pdf", "application/pdf", 512000)

        assert await registry.count() == 0

    @pytest.mark.asyncio
    async def test_repeated_requests_are_unrelated(self, upload_service: UploadSessionService):
        tickets = [
            (await upload_service.request_upload("same.txt", "text/plain", 10))[0]
            for _ in range(20)
        ]

        assert len({t.slug for t in tickets}) == 20
        assert len({t.object_key for t in tickets}) == 20

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [MAX_UPLOAD_BYTES + 1, 0, -5])
    async def test_size_out_of_bounds_rejected_before_identifiers(
        self,
        registry: FileRegistry,
        issuer: CredentialIssuer,
        storage: ObjectStorageClient,
        size: int
    ):
        identifier_factory = MagicMock(side_effect=new_upload_identifiers)
        service = UploadSessionService(
            registry=registry,
            issuer=issuer,
            storage=storage,
            identifier_factory=identifier_factory,
        )

        ticket, error = await service.request_upload("big.bin", "application/octet-stream", size)

        assert ticket is None
        assert error.code == UploadErrorCode.PAYLOAD_TOO_LARGE
        assert not error.retryable
        identifier_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_max_size_accepted(self, upload_service: UploadSessionService):
        ticket, error = await upload_service.request_upload("big.bin", "", MAX_UPLOAD_BYTES)

        assert error is None
        assert ticket is not None

    @pytest.mark.asyncio
    async def test_blank_filename_rejected(self, upload_service: UploadSessionService):
        ticket, error = await upload_service.request_upload("   ", "text/plain", 10)

        assert ticket is None
        assert error.code == UploadErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_unconfigured_signer_is_internal_error(self, registry: FileRegistry):
        storage = ObjectStorageClient(Settings(storage_endpoint=None))
        service = UploadSessionService(
            registry=registry,
            issuer=CredentialIssuer(storage),
            storage=storage,
        )

        ticket, error = await service.request_upload("report.pdf", "application/pdf", 512000)

        assert ticket is None
        assert error.code == UploadErrorCode.INTERNAL
        assert not error.retryable


class TestFinalize:
    """Tests for UploadSessionService.finalize."""

    @pytest.mark.asyncio
    async def test_full_protocol_scenario(self, upload_service: UploadSessionService):
        """request -> finalize -> resolve -> count for report.pdf."""
        ticket, _ = await upload_service.request_upload("report.pdf", "application/pdf", 512000)

        record, error = await upload_service.finalize(
            ticket.slug, ticket.object_key, 512000, "application/pdf"
        )
        assert error is None
        assert record.size_bytes == 512000
        assert record.id is not None

        resolved, error = await upload_service.resolve(ticket.slug)
        assert error is None
        assert resolved.size_bytes == 512000
        assert resolved.content_type == "application/pdf"
        assert resolved.public_url == f"https://files.example.com/{ticket.object_key}"

        total, error = await upload_service.get_upload_count()
        assert error is None
        assert total >= 1

    @pytest.mark.asyncio
    async def test_second_finalize_conflicts(self, upload_service: UploadSessionService):
        ticket, _ = await upload_service.request_upload("a.txt", "text/plain", 100)
        await upload_service.finalize(ticket.slug, ticket.object_key, 100, "text/plain")

        record, error = await upload_service.finalize(
            ticket.slug, "uploads/1/other/a.txt", 100, "text/plain"
        )

        assert record is None
        assert error.code == UploadErrorCode.CONFLICT
        assert not error.retryable

        resolved, _ = await upload_service.resolve(ticket.slug)
        assert resolved.public_url.endswith(ticket.object_key)
        assert (await upload_service.get_upload_count())[0] == 1

    @pytest.mark.asyncio
    async def test_identical_repeat_also_conflicts(self, upload_service: UploadSessionService):
        ticket, _ = await upload_service.request_upload("a.txt", "text/plain", 100)
        await upload_service.finalize(ticket.slug, ticket.object_key, 100, "text/plain")

        _, error = await upload_service.finalize(ticket.slug, ticket.object_key, 100, "text/plain")

        assert error.code == UploadErrorCode.CONFLICT

    @pytest.mark.asyncio
    async def test_empty_content_type_defaults(self, upload_service: UploadSessionService):
        ticket, _ = await upload_service.request_upload("blob", "", 100)

        record, _ = await upload_service.finalize(ticket.slug, ticket.object_key, 100, "")

        assert record.content_type == DEFAULT_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_oversized_finalize_rejected(self, upload_service: UploadSessionService):
        _, error = await upload_service.finalize(
            "slug-a", "uploads/1/a/a.bin", MAX_UPLOAD_BYTES + 1, "application/octet-stream"
        )

        assert error.code == UploadErrorCode.PAYLOAD_TOO_LARGE
        assert (await upload_service.get_upload_count())[0] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["", "has space", "a/b", "café"])
    async def test_unsafe_slug_rejected(self, upload_service: UploadSessionService, slug: str):
        _, error = await upload_service.finalize(slug, "uploads/1/a/a.txt", 10, "text/plain")

        assert error.code == UploadErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_registry_unavailable_is_retryable(
        self,
        upload_service: UploadSessionService,
        registry: FileRegistry
    ):
        with patch.object(registry, "insert", side_effect=RegistryUnavailableError("down")):
            _, error = await upload_service.finalize("slug-a", "uploads/1/a/a.txt", 10, "text/plain")

        assert error.code == UploadErrorCode.UNAVAILABLE
        assert error.retryable


class TestFinalizeVerification:
    """Tests for finalize with upload verification enabled."""

    @pytest.fixture
    def verifying_service(
        self,
        registry: FileRegistry,
        issuer: CredentialIssuer,
        storage: ObjectStorageClient
    ) -> UploadSessionService:
        return UploadSessionService(
            registry=registry,
            issuer=issuer,
            storage=storage,
            verify_uploads=True,
        )

    @pytest.mark.asyncio
    async def test_matching_size_commits(
        self,
        verifying_service: UploadSessionService,
        storage: ObjectStorageClient
    ):
        with patch.object(storage, "get_object_size", return_value=512000):
            record, error = await verifying_service.finalize(
                "slug-a", "uploads/1/a/report.pdf", 512000, "application/pdf"
            )

        assert error is None
        assert record.slug == "slug-a"

    @pytest.mark.asyncio
    async def test_missing_object_rejected(
        self,
        verifying_service: UploadSessionService,
        storage: ObjectStorageClient
    ):
        with patch.object(storage, "get_object_size", return_value=None):
            _, error = await verifying_service.finalize(
                "slug-a", "uploads/1/a/report.pdf", 512000, "application/pdf"
            )

        assert error.code == UploadErrorCode.INVALID_INPUT
        assert (await verifying_service.get_upload_count())[0] == 0

    @pytest.mark.asyncio
    async def test_size_mismatch_rejected(
        self,
        verifying_service: UploadSessionService,
        storage: ObjectStorageClient
    ):
        with patch.object(storage, "get_object_size", return_value=1):
            _, error = await verifying_service.finalize(
                "slug-a", "uploads/1/a/report.pdf", 512000, "application/pdf"
            )

        assert error.code == UploadErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_storage_down_is_unavailable(
        self,
        verifying_service: UploadSessionService,
        storage: ObjectStorageClient
    ):
        with patch.object(storage, "get_object_size", side_effect=StorageUnavailableError("timeout")):
            _, error = await verifying_service.finalize(
                "slug-a", "uploads/1/a/report.pdf", 512000, "application/pdf"
            )

        assert error.code == UploadErrorCode.UNAVAILABLE


class TestResolveAndCount:
    """Tests for resolve and get_upload_count."""

    @pytest.mark.asyncio
    async def test_resolve_unknown_slug(self, upload_service: UploadSessionService):
        resolved, error = await upload_service.resolve("never-issued-slug")

        assert resolved is None
        assert error.code == UploadErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_resolve_hides_internal_fields(self, upload_service: UploadSessionService):
        ticket, _ = await upload_service.request_upload("a.txt", "text/plain", 100)
        await upload_service.finalize(ticket.slug, ticket.object_key, 100, "text/plain")

        resolved, _ = await upload_service.resolve(ticket.slug)

        assert not hasattr(resolved, "id")
        assert not hasattr(resolved, "object_key")

    @pytest.mark.asyncio
    async def test_count_ignores_requests_and_resolves(self, upload_service: UploadSessionService):
        slugs = []
        for i in range(3):
            ticket, _ = await upload_service.request_upload(f"f{i}.txt", "text/plain", 10)
            await upload_service.finalize(ticket.slug, ticket.object_key, 10, "text/plain")
            slugs.append(ticket.slug)

        for _ in range(5):
            await upload_service.request_upload("extra.txt", "text/plain", 10)
        for slug in slugs:
            await upload_service.resolve(slug)
        await upload_service.finalize(slugs[0], "uploads/1/dup/f.txt", 10, "text/plain")

        total, error = await upload_service.get_upload_count()
        assert error is None
        assert total == 3

    @pytest.mark.asyncio
    async def test_count_unavailable(
        self,
        upload_service: UploadSessionService,
        registry: FileRegistry
    ):
        with patch.object(registry, "count", side_effect=RegistryUnavailableError("down")):
            total, error = await upload_service.get_upload_count()

        assert total is None
        assert error.code == UploadErrorCode.UNAVAILABLE
