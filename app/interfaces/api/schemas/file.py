"""Schemas for the file storage endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import DeleteResult, FileDescriptor


class FileRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    url: str
    size: int = Field(ge=0)
    type: str
    uploaded_at: str = Field(alias="uploadedAt")

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "FileRead":
        return cls.model_validate(descriptor.to_payload())


class UploadResponse(FileRead):
    success: bool = True


class FileListResponse(BaseModel):
    success: bool
    files: list[FileRead]
    error: str | None = None


class DeleteResultRead(BaseModel):
    pathname: str
    existed: bool | None
    verified: bool
    attempts: int

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteResultRead":
        return cls.model_validate(result.to_payload())


class DeleteResponse(BaseModel):
    success: bool = True
    result: DeleteResultRead
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: str | None = None
    result: DeleteResultRead | None = None


class HealthResponse(BaseModel):
    status: str
    storage_configured: bool


__all__ = [
    "DeleteResponse",
    "DeleteResultRead",
    "ErrorResponse",
    "FileListResponse",
    "FileRead",
    "HealthResponse",
    "UploadResponse",
]
