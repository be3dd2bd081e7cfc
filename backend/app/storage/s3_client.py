"""
S3-compatible object storage client (Cloudflare R2, MinIO, AWS S3).

Uses boto3 with the S3 API. The service never receives file bytes:
clients PUT directly to the bucket with a presigned URL, and readers
fetch the object from the bucket's public URL.
"""
import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from app.config import Settings

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """The storage provider could not be reached."""


class ObjectStorageClient:
    """
    S3-compatible client for presigned uploads and public URLs.

    Created once at startup and shared for the lifetime of the process.
    """

    def __init__(self, config: Settings):
        """
        Initialize the boto3 client from settings.

        Fails gracefully if storage is not configured (no client);
        callers check is_configured before signing.
        """
        self._config = config
        self._client = None

        if not config.storage_configured:
            logger.warning(
                "Object storage not configured. "
                "Set STORAGE_ENDPOINT, STORAGE_ACCESS_KEY, and STORAGE_SECRET_KEY."
            )
            return

        try:
            # signature_version='s3v4' is required by R2 and MinIO
            self._client = boto3.client(
                's3',
                endpoint_url=config.storage_endpoint,
                aws_access_key_id=config.storage_access_key,
                aws_secret_access_key=config.storage_secret_key,
                region_name=config.storage_region,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': 'path'}
                )
            )
            logger.info(f"Storage client initialized for bucket: {config.storage_bucket}")

        except NoCredentialsError:
            logger.error("Storage credentials not found or invalid")
        except Exception as e:
            logger.error(f"Failed to initialize storage client: {e}")

    @property
    def is_configured(self) -> bool:
        """Check if the storage client is properly configured."""
        return self._client is not None

    @property
    def bucket(self) -> str:
        """Get configured bucket name."""
        return self._config.storage_bucket

    def generate_presigned_upload_url(
        self,
        object_key: str,
        content_type: str,
        expiration: int
    ) -> Optional[str]:
        """
        Generate a presigned PUT URL for direct upload.

        Args:
            object_key: The S3 object key (path in bucket)
            content_type: MIME type the upload must be sent with
            expiration: URL lifetime in seconds

        Returns:
            Presigned URL string, or None if generation fails

        The SigV4 signature covers the bucket, key, expiry and the
        Content-Type header, so the URL only works for that exact object
        and content type until it expires.
        """
        if not self.is_configured:
            logger.error("Cannot generate presigned URL: storage not configured")
            return None

        try:
            url = self._client.generate_presigned_url(
                ClientMethod='put_object',
                Params={
                    'Bucket': self.bucket,
                    'Key': object_key,
                    'ContentType': content_type,
                },
                ExpiresIn=expiration
            )

            logger.debug(f"Generated presigned URL for {object_key}")
            return url

        except ClientError as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            return None
        except BotoCoreError as e:
            logger.error(f"Unexpected error generating presigned URL: {e}")
            return None

    def get_object_size(self, object_key: str) -> Optional[int]:
        """
        Get the size of an uploaded object in bytes.

        Args:
            object_key: The S3 object key

        Returns:
            Size in bytes, or None if the object does not exist

        Raises:
            StorageUnavailableError: storage is unconfigured or unreachable
        """
        if not self.is_configured:
            raise StorageUnavailableError("Object storage not configured")

        try:
            response = self._client.head_object(Bucket=self.bucket, Key=object_key)
            return response.get('ContentLength')
        except ClientError as e:
            if e.response['Error']['Code'] in ('404', 'NoSuchKey', 'NotFound'):
                return None
            logger.error(f"Error checking object {object_key}: {e}")
            raise StorageUnavailableError(str(e)) from e
        except BotoCoreError as e:
            logger.error(f"Storage unreachable while checking {object_key}: {e}")
            raise StorageUnavailableError(str(e)) from e

    def public_url(self, object_key: str) -> str:
        """
        Public URL the bucket serves an object from.

        Pure string transformation, no network call.
        """
        base = self._config.storage_public_url.rstrip('/')
        return f"{base}/{quote(object_key, safe='/')}"
