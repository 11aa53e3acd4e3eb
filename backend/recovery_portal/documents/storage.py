"""Local disk storage for uploaded case documents.

Files are written under UPLOAD_DIR as {organisation_id}/{random hex}{ext}.
The original filename is kept only on the Document row.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class FileTooLargeError(StorageError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, max_size: int):
        super().__init__(f"File exceeds maximum size of {max_size} bytes")
        self.max_size = max_size


@dataclass
class StoredFile:
    """Metadata for a file written to local storage.

    Attributes:
        file_path: Path of the stored file (relative to the working directory if UPLOAD_DIR is)
        size_bytes: File size in bytes
    """
    file_path: str
    size_bytes: int


class LocalFileStorage:
    """Stores uploads on the local filesystem."""

    def __init__(self, base_dir: str, max_size: Optional[int] = None):
        self.base_dir = base_dir
        self.max_size = max_size

    def store_file(self, file: BinaryIO, organisation_id: int, filename: str) -> StoredFile:
        """Copy an uploaded stream to disk.

        Args:
            file: Readable binary stream
            organisation_id: Owning organisation (used as a subdirectory)
            filename: Sanitized original filename (only the extension is used)

        Returns:
            StoredFile: Location and size of the written file

        Raises:
            FileTooLargeError: If the stream is larger than max_size (partial file removed)
            StorageError: If the file cannot be written
        """
        _, ext = os.path.splitext(filename)
        directory = os.path.join(self.base_dir, str(organisation_id))
        file_path = os.path.join(directory, f"{uuid.uuid4().hex}{ext.lower()}")

        size = 0
        try:
            os.makedirs(directory, exist_ok=True)
            with open(file_path, "wb") as out:
                while True:
                    chunk = file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if self.max_size is not None and size > self.max_size:
                        raise FileTooLargeError(self.max_size)
                    out.write(chunk)
        except FileTooLargeError:
            self._discard(file_path)
            raise
        except OSError as e:
            logger.error(f"Failed to store upload {filename}: {e}", exc_info=True)
            self._discard(file_path)
            raise StorageError(f"Failed to store file: {e}")

        logger.info(f"Stored file: path={file_path}, size={size}")
        return StoredFile(file_path=file_path, size_bytes=size)

    def delete_file(self, file_path: str) -> bool:
        """Delete a stored file.

        Returns:
            bool: True if deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        if not os.path.exists(file_path):
            logger.info(f"File not found for deletion: path={file_path}")
            return False

        try:
            os.remove(file_path)
        except OSError as e:
            logger.error(f"File deletion failed: path={file_path}, error={e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Deleted file: path={file_path}")
        return True

    def _discard(self, file_path: str) -> None:
        if os.path.exists(file_path):
            try:
                os.remove(file_path)
            except OSError:
                logger.warning(f"Could not remove partial upload {file_path}")
