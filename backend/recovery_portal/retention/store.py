"""File-backed store for video retention records.

The whole store is a single JSON document:

    {"videos": {"<documentId>": {<VideoRecord, camelCase keys>}, ...}}

It is read in full and written back in full on every operation. Read
failures degrade to an empty store and write failures are logged, so a
damaged metadata file never takes the host process down.

Entries that fail validation are not dropped: they are kept as raw JSON and
written back unchanged until they are repaired or explicitly discarded.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List

from pydantic import ValidationError

from .schemas import VideoRecord

logger = logging.getLogger(__name__)


class VideoMetadataStore:
    """JSON file store keyed by stringified document id.

    Callers that read, modify and write the store must hold ``lock`` for the
    whole cycle. The lock only serializes callers inside this process.
    """

    def __init__(self, path: str):
        self.path = path
        self.lock = threading.RLock()
        self._unparsed: Dict[str, Any] = {}

    @property
    def unparsed_keys(self) -> List[str]:
        """Document ids of entries from the last load that failed validation."""
        return list(self._unparsed)

    def load(self) -> Dict[str, VideoRecord]:
        """Load all records from disk.

        Returns:
            Mapping of document id (as string) to record. Empty if the file is
            missing, unreadable or not a valid store document. Individual
            records that fail validation are left out of the mapping and held
            back for the next save.
        """
        with self.lock:
            self._unparsed = {}

            if not os.path.exists(self.path):
                return {}

            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(
                    f"Error loading video metadata from {self.path}, using empty store",
                    exc_info=True,
                    extra={"error": str(e)}
                )
                return {}

            raw_videos = data.get("videos") if isinstance(data, dict) else None
            if not isinstance(raw_videos, dict):
                logger.error(f"Video metadata file {self.path} has no 'videos' mapping, using empty store")
                return {}

            videos: Dict[str, VideoRecord] = {}
            for doc_key, raw in raw_videos.items():
                try:
                    videos[doc_key] = VideoRecord.model_validate(raw)
                except ValidationError as e:
                    logger.error(
                        f"Invalid video metadata entry {doc_key}, keeping it unchanged",
                        extra={"document_id": doc_key, "error": str(e)}
                    )
                    self._unparsed[doc_key] = raw
            return videos

    def discard_unparsed(self, doc_key: str) -> bool:
        """Drop a held-back invalid entry so the next save removes it from disk."""
        with self.lock:
            return self._unparsed.pop(doc_key, None) is not None

    def save(self, videos: Dict[str, VideoRecord]) -> bool:
        """Write all records to disk, replacing the previous file atomically.

        Invalid entries held back by the last load are written back as they
        were, unless ``videos`` now has a valid record under the same id.

        Args:
            videos: Complete mapping of document id to record

        Returns:
            True if written, False if the write failed (already logged)
        """
        with self.lock:
            for doc_key in videos:
                self._unparsed.pop(doc_key, None)
            raw_videos: Dict[str, Any] = dict(self._unparsed)
            for doc_key, record in videos.items():
                raw_videos[doc_key] = record.model_dump(mode="json", by_alias=True)

            tmp_path = None
            try:
                directory = os.path.dirname(self.path) or "."
                os.makedirs(directory, exist_ok=True)

                fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".video-metadata-", suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump({"videos": raw_videos}, f, indent=2)
                os.replace(tmp_path, self.path)
                return True

            except OSError as e:
                logger.error(
                    f"Error saving video metadata to {self.path}",
                    exc_info=True,
                    extra={"error": str(e)}
                )
                if tmp_path and os.path.exists(tmp_path):
                    try:
                        os.remove(tmp_path)
                    except OSError:
                        logger.warning(f"Could not remove temporary metadata file {tmp_path}")
                return False
