"""
File Storage Service - where uploaded document bytes live.

Two backends, selected by FILE_STORAGE_BACKEND:
1. local   - files under UPLOAD_DIR/<opportunity hex>/<timestamp>-<name>
2. gridfs  - MongoDB GridFS bucket (see db/mongodb.py)

Both return an object name that is stored in documents.object_name and
used later to read or delete the file.
"""

import time
from pathlib import Path
from typing import Optional

from bson import ObjectId
from gridfs.errors import NoFile
from loguru import logger

from eduopps.core.config import get_settings
from eduopps.db.mongodb import get_gridfs_bucket
from eduopps.utils.file_upload import sanitize_filename


class StorageError(Exception):
    """Raised when the file store cannot save, read or delete a file."""


class LocalFileStorage:
    """Stores files on local disk."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, object_name: str) -> Path:
        path = (self.root / object_name).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Invalid object name: {object_name}")
        return path

    def save(self, opportunity_id: int, filename: str, content: bytes, content_type: str) -> str:
        object_name = f"{opportunity_id:x}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        path = self._path(object_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(str(e)) from e
        return object_name

    def read(self, object_name: str) -> bytes:
        try:
            return self._path(object_name).read_bytes()
        except OSError as e:
            raise StorageError(str(e)) from e

    def delete(self, object_name: str) -> None:
        try:
            self._path(object_name).unlink()
        except OSError as e:
            raise StorageError(str(e)) from e


class GridFSFileStorage:
    """Stores files in MongoDB GridFS; the object name is the GridFS file id."""

    def save(self, opportunity_id: int, filename: str, content: bytes, content_type: str) -> str:
        try:
            file_id = get_gridfs_bucket().upload_from_stream(
                sanitize_filename(filename),
                content,
                metadata={"opportunity_id": opportunity_id, "content_type": content_type},
            )
        except Exception as e:
            raise StorageError(str(e)) from e
        return str(file_id)

    def read(self, object_name: str) -> bytes:
        try:
            stream = get_gridfs_bucket().open_download_stream(ObjectId(object_name))
            return stream.read()
        except NoFile as e:
            raise StorageError(f"File not found: {object_name}") from e
        except Exception as e:
            raise StorageError(str(e)) from e

    def delete(self, object_name: str) -> None:
        try:
            get_gridfs_bucket().delete(ObjectId(object_name))
        except Exception as e:
            raise StorageError(str(e)) from e


_storage = None


def get_file_storage():
    """Get or create the configured file store (singleton pattern)."""
    global _storage
    if _storage is None:
        settings = get_settings()
        if settings.file_storage_backend == "gridfs":
            _storage = GridFSFileStorage()
        else:
            _storage = LocalFileStorage(settings.upload_dir)
        logger.info(f"File storage backend: {settings.file_storage_backend}")
    return _storage


def reset_file_storage(storage: Optional[object] = None):
    """Replace the cached store (tests point it at a temporary directory)."""
    global _storage
    _storage = storage
