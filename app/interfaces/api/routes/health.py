"""Liveness route reporting whether storage is configured."""

from fastapi import APIRouter, Depends

from app.infrastructure.storage import BlobStore
from app.interfaces.api.dependencies import get_optional_blob_store
from app.interfaces.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(store: BlobStore | None = Depends(get_optional_blob_store)) -> HealthResponse:
    return HealthResponse(status="ok", storage_configured=store is not None)


__all__ = ["router"]
