"""
Upload storage for project artifacts (code archives and preview media).

Files are written under the configured upload directory with a random
name and served back under URL_PREFIX.
"""
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger("uvicorn.error")

URL_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024


class UploadTooLarge(Exception):
    """An uploaded file exceeded the configured size limit"""


@dataclass
class StoredFile:
    filename: str  # Name on disk, unique per upload
    original_name: str | None
    size: int

    @property
    def url(self) -> str:
        return f"{URL_PREFIX}/{self.filename}"


def path_for_url(upload_dir: str | Path, url: str) -> Path | None:
    """Map a /uploads/<name> URL back to its file, or None if it is not one of ours."""
    if not url or not url.startswith(URL_PREFIX + "/"):
        return None
    name = url[len(URL_PREFIX) + 1:]
    if not name or "/" in name or "\\" in name or name.startswith("."):
        return None
    return Path(upload_dir) / name


async def save_upload(upload: UploadFile, upload_dir: str | Path, max_bytes: int) -> StoredFile:
    """
    Stream an uploaded file to disk.

    The stored name is random hex plus the original extension (if any).

    Raises:
        UploadTooLarge: the file is bigger than max_bytes (nothing is kept)
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()[:16]
    filename = secrets.token_hex(16) + suffix
    target = directory / filename

    size = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadTooLarge(f"{upload.filename} exceeds {max_bytes} bytes")
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.info("[upload] stored %s as %s (%s bytes)", upload.filename, filename, size)
    return StoredFile(filename=filename, original_name=upload.filename, size=size)
