"""
Pydantic schemas for upload endpoints.

Size bounds are deliberately not declared here: an oversized request
must reach the service and come back as 413, not as a 422.
"""
from pydantic import BaseModel, Field
from datetime import datetime


class UploadRequest(BaseModel):
    """Request schema for a presigned upload URL."""
    filename: str = Field(..., min_length=1, max_length=255, description="Original filename")
    content_type: str = Field("", max_length=255, description="MIME type (defaults to application/octet-stream)")
    size_bytes: int = Field(..., description="File size in bytes (1 to 200MB)")

    class Config:
        json_schema_extra = {
            "example": {
                "filename": "report.pdf",
                "content_type": "application/pdf",
                "size_bytes": 512000
            }
        }


class UploadResponse(BaseModel):
    """Response schema for a presigned upload URL."""
    upload_url: str = Field(..., description="Presigned PUT URL for direct upload")
    object_key: str = Field(..., description="Object key in storage bucket")
    slug: str = Field(..., description="Public identifier for the share link")
    expires_at: datetime = Field(..., description="When the upload URL stops working")
    expires_in: int = Field(..., description="URL expiration time in seconds")

    class Config:
        from_attributes = True


class FinalizeRequest(BaseModel):
    """Request schema for committing an upload."""
    slug: str = Field(..., min_length=1, max_length=128)
    object_key: str = Field(..., min_length=1, max_length=1024)
    size_bytes: int = Field(..., description="File size in bytes")
    content_type: str = Field("", max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "slug": "lx3k2a1b-3q2vQm1b8W8Jt0x4m8e9gA",
                "object_key": "uploads/1718000000000/0f6c.../report.pdf",
                "size_bytes": 512000,
                "content_type": "application/pdf"
            }
        }


class UploadCountResponse(BaseModel):
    """Response schema for the upload counter."""
    total_count: int = Field(..., ge=0)
