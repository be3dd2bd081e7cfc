"""
Pydantic schemas for API request/response validation.
"""
from app.schemas.upload import (
    UploadRequest,
    UploadResponse,
    FinalizeRequest,
    UploadCountResponse,
)
from app.schemas.file import (
    FileRecordResponse,
    FileInfoResponse,
)

__all__ = [
    "UploadRequest",
    "UploadResponse",
    "FinalizeRequest",
    "UploadCountResponse",
    "FileRecordResponse",
    "FileInfoResponse",
]
