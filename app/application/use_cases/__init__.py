"""Aggregate application use cases."""

from .files import delete_file, list_files, upload_file

__all__ = [
    "delete_file",
    "list_files",
    "upload_file",
]
