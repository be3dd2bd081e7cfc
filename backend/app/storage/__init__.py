"""
Storage module for S3-compatible object storage.

This module handles direct uploads from clients using presigned URLs.
The backend NEVER receives file bytes - files go directly to the bucket.
"""
from app.storage.s3_client import ObjectStorageClient, StorageUnavailableError
from app.storage.credentials import CredentialIssuer, CredentialIssueError, UploadCredential
from app.storage.identifiers import new_upload_identifiers

__all__ = [
    "ObjectStorageClient",
    "StorageUnavailableError",
    "CredentialIssuer",
    "CredentialIssueError",
    "UploadCredential",
    "new_upload_identifiers",
]
