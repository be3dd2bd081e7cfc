"""
Upload session service.

Orchestrates the three-phase upload protocol:
1. request_upload - generate identifiers and a presigned PUT URL
2. (client uploads directly to storage)
3. finalize      - commit metadata to the registry
4. resolve       - map a slug to its public URL

No pending state is persisted between phases; the client holds the
slug and object key until it finalizes. The registry's UNIQUE
constraints are the only guard against double commits.

Every operation returns (value, error). Exactly one of the two is None.
"""
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Tuple

from app.config import MAX_UPLOAD_BYTES
from app.models.file_record import FileRecord
from app.repositories.file_registry import (
    FileRegistry,
    DuplicateKeyError,
    RecordNotFoundError,
    RegistryUnavailableError,
)
from app.services.errors import UploadError, UploadErrorCode
from app.storage.credentials import CredentialIssuer, CredentialIssueError
from app.storage.identifiers import new_upload_identifiers
from app.storage.s3_client import ObjectStorageClient, StorageUnavailableError
from app.utils.logging import (
    log_upload_requested,
    log_upload_finalized,
    log_upload_rejected,
    log_registry_failure,
)
from app.utils.metrics import (
    upload_requests_total,
    uploads_finalized_total,
    upload_rejections_total,
    upload_size_bytes,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

SLUG_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class UploadTicket:
    """Everything the client needs to upload and later finalize."""
    upload_url: str
    object_key: str
    slug: str
    expires_at: datetime
    expires_in: int


@dataclass(frozen=True)
class ResolvedFile:
    """Public view of a committed file. Never carries id or object_key."""
    slug: str
    content_type: str
    size_bytes: int
    public_url: str
    created_at: datetime


class UploadSessionService:
    """
    Service for the upload-registration protocol.

    Responsibilities:
    - Validate sizes and inputs before touching storage or the registry
    - Issue presigned upload URLs
    - Commit file metadata exactly once per slug
    - Resolve slugs to public URLs and report the upload count
    """

    def __init__(
        self,
        registry: FileRegistry,
        issuer: CredentialIssuer,
        storage: ObjectStorageClient,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        verify_uploads: bool = False,
        identifier_factory: Callable[[str], Tuple[str, str]] = new_upload_identifiers,
    ):
        self.registry = registry
        self._issuer = issuer
        self._storage = storage
        self._max_upload_bytes = max_upload_bytes
        self._verify_uploads = verify_uploads
        self._new_identifiers = identifier_factory

    def _reject(
        self,
        operation: str,
        code: UploadErrorCode,
        message: str,
        slug: Optional[str] = None
    ) -> UploadError:
        upload_rejections_total.labels(operation=operation, code=code.value).inc()
        if code in (UploadErrorCode.UNAVAILABLE, UploadErrorCode.INTERNAL):
            log_registry_failure(logger, operation=operation, error=message, slug=slug)
        else:
            log_upload_rejected(logger, operation=operation, code=code.value, reason=message, slug=slug)
        return UploadError(code=code, message=message)

    def _check_size(self, operation: str, size_bytes: int) -> Optional[UploadError]:
        if size_bytes <= 0 or size_bytes > self._max_upload_bytes:
            return self._reject(
                operation,
                UploadErrorCode.PAYLOAD_TOO_LARGE,
                f"File size must be between 1 and {self._max_upload_bytes} bytes, got {size_bytes}"
            )
        return None

    async def request_upload(
        self,
        filename: str,
        content_type: str,
        size_bytes: int
    ) -> Tuple[Optional[UploadTicket], Optional[UploadError]]:
        """
        Issue a presigned upload URL for a new file.

        Nothing is written to the registry; calling this twice yields two
        unrelated slug/object key pairs.
        """
        start = time.perf_counter()

        error = self._check_size("request_upload", size_bytes)
        if error:
            return None, error

        if not filename or not filename.strip():
            return None, self._reject(
                "request_upload", UploadErrorCode.INVALID_INPUT, "Filename must not be empty"
            )

        content_type = (content_type or "").strip() or DEFAULT_CONTENT_TYPE
        slug, object_key = self._new_identifiers(filename)

        try:
            credential = self._issuer.issue(object_key, content_type, size_bytes)
        except CredentialIssueError as e:
            return None, self._reject(
                "request_upload", UploadErrorCode.INTERNAL, str(e), slug=slug
            )

        upload_requests_total.inc()
        log_upload_requested(
            logger,
            slug=slug,
            object_key=object_key,
            size_bytes=size_bytes,
            content_type=content_type,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

        return UploadTicket(
            upload_url=credential.url,
            object_key=object_key,
            slug=slug,
            expires_at=credential.expires_at,
            expires_in=credential.expires_in,
        ), None

    async def _verify_object(
        self,
        slug: str,
        object_key: str,
        size_bytes: int
    ) -> Optional[UploadError]:
        """Cross-check the declared size against what storage actually holds."""
        try:
            actual_size = self._storage.get_object_size(object_key)
        except StorageUnavailableError as e:
            return self._reject("finalize", UploadErrorCode.UNAVAILABLE, str(e), slug=slug)

        if actual_size is None:
            return self._reject(
                "finalize",
                UploadErrorCode.INVALID_INPUT,
                f"Object '{object_key}' has not been uploaded",
                slug=slug
            )
        if actual_size != size_bytes:
            return self._reject(
                "finalize",
                UploadErrorCode.INVALID_INPUT,
                f"Declared size {size_bytes} does not match stored size {actual_size}",
                slug=slug
            )
        return None

    async def finalize(
        self,
        slug: str,
        object_key: str,
        size_bytes: int,
        content_type: str
    ) -> Tuple[Optional[FileRecord], Optional[UploadError]]:
        """
        Commit file metadata after the client finished uploading.

        A slug can be committed once. A repeat is a CONFLICT and must not
        be retried; the client has to request a new upload.
        """
        start = time.perf_counter()

        error = self._check_size("finalize", size_bytes)
        if error:
            return None, error

        if not slug or not SLUG_PATTERN.fullmatch(slug):
            return None, self._reject(
                "finalize", UploadErrorCode.INVALID_INPUT, "Slug must be a non-empty URL-safe string"
            )
        if not object_key or not object_key.strip():
            return None, self._reject(
                "finalize", UploadErrorCode.INVALID_INPUT, "Object key must not be empty", slug=slug
            )

        content_type = (content_type or "").strip() or DEFAULT_CONTENT_TYPE

        if self._verify_uploads:
            error = await self._verify_object(slug, object_key, size_bytes)
            if error:
                return None, error

        try:
            record = await self.registry.insert(
                slug=slug,
                object_key=object_key,
                size_bytes=size_bytes,
                content_type=content_type,
            )
        except DuplicateKeyError as e:
            return None, self._reject("finalize", UploadErrorCode.CONFLICT, str(e), slug=slug)
        except RegistryUnavailableError as e:
            return None, self._reject("finalize", UploadErrorCode.UNAVAILABLE, str(e), slug=slug)

        uploads_finalized_total.inc()
        upload_size_bytes.observe(size_bytes)
        log_upload_finalized(
            logger,
            slug=slug,
            size_bytes=size_bytes,
            record_id=record.id,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

        return record, None

    async def resolve(self, slug: str) -> Tuple[Optional[ResolvedFile], Optional[UploadError]]:
        """Look up a slug and derive the public URL of its object."""
        try:
            record = await self.registry.find_by_slug(slug)
        except RecordNotFoundError as e:
            return None, self._reject("resolve", UploadErrorCode.NOT_FOUND, str(e), slug=slug)
        except RegistryUnavailableError as e:
            return None, self._reject("resolve", UploadErrorCode.UNAVAILABLE, str(e), slug=slug)

        return ResolvedFile(
            slug=record.slug,
            content_type=record.content_type,
            size_bytes=record.size_bytes,
            public_url=self._storage.public_url(record.object_key),
            created_at=record.created_at,
        ), None

    async def get_upload_count(self) -> Tuple[Optional[int], Optional[UploadError]]:
        """Number of committed uploads, read from the registry on every call."""
        try:
            return await self.registry.count(), None
        except RegistryUnavailableError as e:
            return None, self._reject("get_upload_count", UploadErrorCode.UNAVAILABLE, str(e))
