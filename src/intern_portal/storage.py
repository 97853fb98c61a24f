import logging
import os
import uuid
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from intern_portal.config import get_settings
from intern_portal.errors import NotFound, StorageError

logger = logging.getLogger(__name__)


class BlobStorage(ABC):
    """Where uploaded files live. References are opaque strings."""

    @abstractmethod
    def save(self, data: bytes, filename: str) -> str:
        ...

    @abstractmethod
    def delete(self, reference: str) -> None:
        ...

    @abstractmethod
    def read(self, reference: str) -> bytes:
        ...

    @abstractmethod
    def exists(self, reference: str) -> bool:
        ...


class LocalBlobStorage(BlobStorage):

    def __init__(self, root):
        self.root = Path(root)

    def _path(self, reference: str) -> Path:
        # References are bare file names; anything else could escape the root.
        if not reference or os.path.basename(reference) != reference:
            raise NotFound("File not found on server", code="FILE_NOT_FOUND")
        return self.root / reference

    def save(self, data: bytes, filename: str) -> str:
        _, ext = os.path.splitext(filename)
        reference = f"{uuid.uuid4().hex}{ext.lower()}"
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(self.root / reference, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not store file: {e}") from e
        logger.debug("Stored %s as %s (%d bytes)", filename, reference, len(data))
        return reference

    def delete(self, reference: str) -> None:
        try:
            os.remove(self._path(reference))
        except FileNotFoundError as e:
            raise NotFound("File not found on server", code="FILE_NOT_FOUND") from e
        except OSError as e:
            raise StorageError(f"Could not delete file: {e}") from e

    def read(self, reference: str) -> bytes:
        try:
            with open(self._path(reference), "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFound("File not found on server", code="FILE_NOT_FOUND") from e
        except OSError as e:
            raise StorageError(f"Could not read file: {e}") from e

    def exists(self, reference: str) -> bool:
        try:
            return self._path(reference).is_file()
        except NotFound:
            return False


@lru_cache
def get_storage() -> BlobStorage:
    return LocalBlobStorage(get_settings().upload_path)
