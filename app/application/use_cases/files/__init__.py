"""Use cases for uploading, listing and deleting stored files."""

from .delete_file import confirmed_absent, delete_file
from .list_files import describe_blob, list_files
from .upload_file import upload_file

__all__ = [
    "confirmed_absent",
    "delete_file",
    "describe_blob",
    "list_files",
    "upload_file",
]
