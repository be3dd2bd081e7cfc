"""
Pydantic schemas for file records and resolved files.
"""
from pydantic import BaseModel
from datetime import datetime


class FileRecordResponse(BaseModel):
    """Committed file record, returned by finalize."""
    id: int
    slug: str
    object_key: str
    size_bytes: int
    content_type: str
    created_at: datetime

    class Config:
        from_attributes = True


class FileInfoResponse(BaseModel):
    """Public file information for a share link."""
    slug: str
    content_type: str
    size_bytes: int
    public_url: str
    created_at: datetime

    class Config:
        from_attributes = True
