"""Domain entities exposed by the application."""

from .delete_result import DeleteResult
from .file_descriptor import FileDescriptor
from .stored_blob import PutResult, StoredBlob

__all__ = [
    "DeleteResult",
    "FileDescriptor",
    "PutResult",
    "StoredBlob",
]
