"""
Upload credential issuing.

A credential is a presigned PUT URL scoped to one object key and one
content type, valid for a fixed window. The storage provider checks the
signature when the client uploads; nothing here verifies it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from app.storage.s3_client import ObjectStorageClient

logger = logging.getLogger(__name__)


class CredentialIssueError(Exception):
    """The signer is missing or failed; retrying will not help."""


@dataclass(frozen=True)
class UploadCredential:
    """Time-bounded authorization to PUT one object."""
    url: str
    expires_at: datetime
    expires_in: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialIssuer:
    """Issues presigned upload URLs through the storage client."""

    def __init__(
        self,
        storage: ObjectStorageClient,
        expiration: int = 3600,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._storage = storage
        self._expiration = expiration
        self._clock = clock

    @property
    def expiration(self) -> int:
        return self._expiration

    def issue(self, object_key: str, content_type: str, size_bytes: int) -> UploadCredential:
        """
        Build a signed write target for exactly object_key.

        size_bytes is not part of the signature; a presigned PUT cannot
        bind Content-Length, so the size is checked at finalize instead.

        Raises:
            CredentialIssueError: storage is unconfigured or signing failed
        """
        if not self._storage.is_configured:
            raise CredentialIssueError("Object storage not configured")

        expires_at = self._clock() + timedelta(seconds=self._expiration)
        url = self._storage.generate_presigned_upload_url(
            object_key,
            content_type,
            expiration=self._expiration,
        )
        if not url:
            raise CredentialIssueError(f"Failed to sign upload URL for {object_key}")

        logger.debug(f"Issued upload credential for {object_key} ({size_bytes} bytes)")
        return UploadCredential(url=url, expires_at=expires_at, expires_in=self._expiration)
