from .file import (
    DeleteResponse,
    DeleteResultRead,
    ErrorResponse,
    FileListResponse,
    FileRead,
    HealthResponse,
    UploadResponse,
)

__all__ = [
    "DeleteResponse",
    "DeleteResultRead",
    "ErrorResponse",
    "FileListResponse",
    "FileRead",
    "HealthResponse",
    "UploadResponse",
]
