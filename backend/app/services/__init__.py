"""
Business logic services.
"""
from app.services.errors import UploadError, UploadErrorCode
from app.services.upload_service import UploadSessionService, UploadTicket, ResolvedFile

__all__ = [
    "UploadError",
    "UploadErrorCode",
    "UploadSessionService",
    "UploadTicket",
    "ResolvedFile",
]
