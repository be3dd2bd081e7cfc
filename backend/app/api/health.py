"""
Health check endpoint.
Verifies registry (database) connectivity.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_registry
from app.repositories.file_registry import FileRegistry, RegistryUnavailableError

router = APIRouter()


@router.get("")
async def health_check(registry: FileRegistry = Depends(get_registry)):
    """
    Health check endpoint.
    Returns status of the database connection.
    """
    health_status = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "unknown",
    }

    try:
        await registry.ping()
        health_status["database"] = "connected"
    except RegistryUnavailableError as e:
        health_status["database"] = f"error: {str(e)}"
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
