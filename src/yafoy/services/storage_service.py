"""Object storage on the local filesystem, served by a static mount."""

import logging
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from yafoy.core.config import settings
from yafoy.core.exceptions import PayloadTooLargeError, ServiceError, StorageUnavailableError

logger = logging.getLogger(__name__)

CHAT_FILES_BUCKET = "chat-files"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
UPLOAD_CHUNK_BYTES = 64 * 1024


def _too_large(max_bytes: int) -> PayloadTooLargeError:
    return PayloadTooLargeError(
        "FILE_TOO_LARGE",
        f"Fichier trop volumineux (max {max_bytes // (1024 * 1024)} Mo).",
    )


async def read_limited(file: UploadFile, max_bytes: int = MAX_UPLOAD_BYTES) -> bytes:
    """Read an upload in chunks, giving up as soon as it exceeds ``max_bytes``.

    Raises:
        PayloadTooLargeError: The declared or actual size is over the limit
    """
    if file.size is not None and file.size > max_bytes:
        raise _too_large(max_bytes)

    chunks = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise _too_large(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def _write_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


class StorageService:
    """Writes objects under ``{root}/{bucket}/{path}``."""

    def __init__(self, root: str | None = None, public_url: str | None = None):
        self.root = Path(root or settings.STORAGE_ROOT).resolve()
        self.public_base = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_root = (self.root / bucket).resolve()
        target = (bucket_root / path).resolve()
        if bucket_root not in target.parents:
            raise ServiceError("INVALID_PATH", "Chemin de fichier invalide.")
        return target

    async def upload(self, bucket: str, path: str, data: bytes) -> str:
        """Store ``data`` and return the object path within the bucket.

        The write runs in the threadpool.

        Raises:
            ServiceError: The path escapes the bucket
            StorageUnavailableError: The write failed
        """
        target = self._resolve(bucket, path)
        try:
            await run_in_threadpool(_write_file, target, data)
        except OSError:
            logger.exception(f"Failed to store {bucket}/{path}")
            raise StorageUnavailableError("UPLOAD_FAILED", "Impossible d'envoyer le fichier.")
        logger.info(f"Stored {bucket}/{path} ({len(data)} bytes)")
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base}/{bucket}/{path}"


def get_storage_service() -> StorageService:
    return StorageService()
