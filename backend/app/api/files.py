"""
Share link endpoints.
Resolve a slug to the file's public storage URL.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from app.api.dependencies import get_upload_service, raise_for_error
from app.schemas.file import FileInfoResponse
from app.services.upload_service import UploadSessionService

router = APIRouter()


@router.get("/{slug}", response_model=FileInfoResponse)
async def get_file(
    slug: str,
    service: UploadSessionService = Depends(get_upload_service)
):
    """File metadata and public URL for a slug."""
    resolved, error = await service.resolve(slug)
    if error:
        raise_for_error(error)

    return FileInfoResponse.model_validate(resolved)


@router.get("/{slug}/download")
async def download_file(
    slug: str,
    service: UploadSessionService = Depends(get_upload_service)
):
    """Redirect a share link straight to the stored object."""
    resolved, error = await service.resolve(slug)
    if error:
        raise_for_error(error)

    return RedirectResponse(
        url=resolved.public_url,
        status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )
