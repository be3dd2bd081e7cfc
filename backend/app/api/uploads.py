"""
Upload endpoints for the direct-to-storage flow.

1. POST /uploads/request  - Get presigned URL, slug and object key
2. (client PUTs the file straight to storage)
3. POST /uploads/finalize - Commit file metadata
4. GET  /uploads/count    - Total committed uploads

Why this approach?
- Backend never handles file bytes (no bandwidth/memory issues)
- Scales to 200MB files without a backend bottleneck
- Nothing is stored until the client finalizes
"""
from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_upload_service, raise_for_error
from app.schemas.upload import (
    UploadRequest,
    UploadResponse,
    FinalizeRequest,
    UploadCountResponse,
)
from app.schemas.file import FileRecordResponse
from app.services.upload_service import UploadSessionService

router = APIRouter()


@router.post("/request", response_model=UploadResponse)
async def request_upload(
    request: UploadRequest,
    service: UploadSessionService = Depends(get_upload_service)
):
    """
    Generate a presigned URL for direct file upload.

    Client then:
    1. PUTs the file to upload_url with the same Content-Type
    2. Calls /uploads/finalize with slug, object_key, size and type

    Returns 413 when size_bytes is outside 1 byte to 200MB.
    """
    ticket, error = await service.request_upload(
        filename=request.filename,
        content_type=request.content_type,
        size_bytes=request.size_bytes
    )
    if error:
        raise_for_error(error)

    return UploadResponse.model_validate(ticket)


@router.post(
    "/finalize",
    response_model=FileRecordResponse,
    status_code=status.HTTP_201_CREATED
)
async def finalize_upload(
    request: FinalizeRequest,
    service: UploadSessionService = Depends(get_upload_service)
):
    """
    Confirm that an upload has completed and register the file.

    A slug can only be finalized once. A second call returns 409 and the
    client has to start over from /uploads/request.
    """
    record, error = await service.finalize(
        slug=request.slug,
        object_key=request.object_key,
        size_bytes=request.size_bytes,
        content_type=request.content_type
    )
    if error:
        raise_for_error(error)

    return FileRecordResponse.model_validate(record)


@router.get("/count", response_model=UploadCountResponse)
async def get_upload_count(
    service: UploadSessionService = Depends(get_upload_service)
):
    """Total number of committed uploads."""
    total, error = await service.get_upload_count()
    if error:
        raise_for_error(error)

    return UploadCountResponse(total_count=total)
