from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from listing_admin.core.exceptions import StorageWriteError, ValidationError
from listing_admin.services.storage import ObjectStore
from listing_admin.utils.strings import sanitize_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


_clock_lock = threading.Lock()
_last_ms = 0


def _next_timestamp_ms() -> int:
    """Milliseconds since the epoch, strictly increasing within this process."""
    global _last_ms
    with _clock_lock:
        now = int(time.time() * 1000)
        _last_ms = now if now > _last_ms else _last_ms + 1
        return _last_ms


class ImageIngestor:
    """Stores uploaded images in the bucket and hands back their public URLs."""

    def __init__(self, store: ObjectStore, bucket: str, key_prefix: str = "", max_workers: int = 1):
        self.store = store
        self.bucket = bucket
        self.key_prefix = key_prefix
        self.max_workers = max(1, max_workers)

    def build_key(self, filename: Optional[str]) -> str:
        return f"{self.key_prefix}{_next_timestamp_ms()}_{sanitize_filename(filename)}"

    def ingest(self, data: bytes, filename: Optional[str], content_type: Optional[str]) -> str:
        if not data:
            raise ValidationError(f"Empty file: {filename or 'upload'}")

        key = self.build_key(filename)
        # upsert so a retried request reusing the key overwrites instead of failing
        self.store.put(self.bucket, key, data, content_type or "application/octet-stream", upsert=True)
        logger.info("Uploaded image %s/%s (%d bytes)", self.bucket, key, len(data))
        return self.store.public_url(self.bucket, key)

    def ingest_file(self, upload: UploadedFile) -> str:
        return self.ingest(upload.data, upload.filename, upload.content_type)

    def ingest_many(self, uploads: Sequence[UploadedFile]) -> List[str]:
        """Ingest in parallel; the returned URLs follow the order of ``uploads``."""
        uploads = list(uploads)
        for up in uploads:
            if not up.data:
                raise ValidationError(f"Empty file: {up.filename or 'upload'}")

        if self.max_workers == 1 or len(uploads) < 2:
            return [self.ingest_file(up) for up in uploads]

        workers = min(self.max_workers, len(uploads))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as pool:
            futures = [pool.submit(self.ingest_file, up) for up in uploads]
        # every task has finished here; surface the first failure by position
        urls = []
        for fut in futures:
            exc = fut.exception()
            if exc is not None:
                if isinstance(exc, StorageWriteError):
                    raise exc
                raise StorageWriteError(f"Image upload failed: {exc}") from exc
            urls.append(fut.result())
        return urls

    def discard(self, urls: Sequence[Optional[str]]) -> int:
        """Best-effort removal of bucket objects behind ``urls``; foreign URLs are skipped."""
        keys = []
        for url in urls:
            key = self.store.key_for_url(self.bucket, url) if url else None
            if key:
                keys.append(key)
        if not keys:
            return 0
        try:
            self.store.remove(self.bucket, keys)
        except StorageWriteError as e:
            logger.warning("Could not purge %d image(s): %s", len(keys), e.message)
            return 0
        return len(keys)
