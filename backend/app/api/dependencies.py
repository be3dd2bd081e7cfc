"""
FastAPI dependencies for the upload service and registry.

Both are built once in the application lifespan and kept on app.state;
tests replace them through app.dependency_overrides.
"""
from fastapi import HTTPException, Request, status

from app.repositories.file_registry import FileRegistry
from app.services.errors import UploadError, UploadErrorCode
from app.services.upload_service import UploadSessionService

ERROR_STATUS = {
    UploadErrorCode.PAYLOAD_TOO_LARGE: 413,
    UploadErrorCode.INVALID_INPUT: 422,
    UploadErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    UploadErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    UploadErrorCode.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    UploadErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_upload_service(request: Request) -> UploadSessionService:
    """Upload service created at startup."""
    return request.app.state.upload_service


def get_registry(request: Request) -> FileRegistry:
    """File registry created at startup."""
    return request.app.state.registry


def raise_for_error(error: UploadError) -> None:
    """Translate a typed service error into an HTTP error response."""
    raise HTTPException(
        status_code=ERROR_STATUS[error.code],
        detail=error.to_dict()
    )
