import logging
import mimetypes
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO, List, Optional, Union
from uuid import uuid4

from filelock import FileLock, Timeout

from storefront.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The only error type that leaves BlobStorage; backend errors never do."""

    pass


class BlobNotFound(Exception):
    pass


@dataclass
class UploadResult:
    url: str
    pathname: str
    size: int
    uploaded_at: datetime

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "pathname": self.pathname,
            "size": self.size,
            "uploadedAt": self.uploaded_at.isoformat(),
        }


class LocalBlobStore:
    """
    Object-store backend on the local filesystem. Blobs are addressed by a
    POSIX pathname relative to `root` and served under `public_url`.
    """

    def __init__(self, root: str, public_url: str, lock_timeout: float = 10):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_url = public_url.rstrip("/")
        self.lock_timeout = lock_timeout
        self.locks_dir = self.root / ".locks"
        self.locks_dir.mkdir(parents=True, exist_ok=True)

    def _resolve(self, pathname: str) -> Path:
        if ".." in PurePosixPath(pathname).parts:
            raise ValueError(f"Relative segments not allowed: {pathname}")
        target = (self.root / pathname.lstrip("/")).resolve()
        if self.root not in target.parents:
            raise ValueError(f"Pathname escapes storage root: {pathname}")
        return target

    def _lock(self, pathname: str) -> FileLock:
        safe = pathname.strip("/").replace("/", "__")
        return FileLock(str(self.locks_dir / f"{safe}.lock"))

    def put(self, pathname: str, data: bytes, content_type: str) -> dict:
        target = self._resolve(pathname)
        target.parent.mkdir(parents=True, exist_ok=True)
        with self._lock(pathname).acquire(timeout=self.lock_timeout):
            tmp = target.with_name(target.name + ".part")
            tmp.write_bytes(data)
            os.replace(tmp, target)
        return {
            "url": f"{self.public_url}/{pathname}",
            "pathname": pathname,
            "contentType": content_type,
        }

    def head(self, pathname: str) -> dict:
        target = self._resolve(pathname)
        if not target.is_file():
            raise BlobNotFound(pathname)
        return {"pathname": pathname, "size": target.stat().st_size}

    def delete(self, pathname: str):
        target = self._resolve(pathname)
        if not target.is_file():
            raise BlobNotFound(pathname)
        with self._lock(pathname).acquire(timeout=self.lock_timeout):
            target.unlink()

    def list(self, prefix: str) -> List[str]:
        out = []
        for p in sorted(self.root.rglob("*")):
            if not p.is_file() or self.locks_dir in p.parents or p.name.endswith(".part"):
                continue
            rel = p.relative_to(self.root).as_posix()
            if rel.startswith(prefix):
                out.append(rel)
        return out

    def ping(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)


def with_random_suffix(pathname: str) -> str:
    """products/1/photo.jpg -> products/1/photo-3f9c2a1b.jpg"""
    p = PurePosixPath(pathname)
    return str(p.with_name(f"{p.stem}-{uuid4().hex[:8]}{p.suffix}"))


class BlobStorage:
    """
    Thin adapter over an object-store backend: upload / delete / exists / list.
    Failures become False, [] or StorageError.
    """

    def __init__(self, backend=None):
        self.backend = backend or LocalBlobStore(settings.STORAGE_DIR, settings.STORAGE_PUBLIC_URL)

    def upload(
        self,
        content: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
        add_random_suffix: bool = True,
    ) -> UploadResult:
        try:
            data = content if isinstance(content, (bytes, bytearray)) else content.read()
            pathname = path.lstrip("/")
            if add_random_suffix:
                pathname = with_random_suffix(pathname)
            content_type = (
                content_type
                or mimetypes.guess_type(pathname)[0]
                or "application/octet-stream"
            )
            blob = self.backend.put(pathname, bytes(data), content_type)
            return UploadResult(
                url=blob["url"],
                pathname=blob["pathname"],
                size=len(data),
                uploaded_at=datetime.now(timezone.utc),
            )
        except Timeout as e:
            logger.error("Upload lock timeout for %s: %s", path, e)
            raise StorageError("Failed to upload file")
        except Exception as e:
            logger.error("Upload to object storage failed for %s: %s", path, e, exc_info=True)
            raise StorageError("Failed to upload file")

    def delete(self, pathname: str) -> bool:
        try:
            self.backend.delete(pathname)
            return True
        except Exception as e:
            logger.error("Delete from object storage failed for %s: %s", pathname, e)
            return False

    def exists(self, pathname: str) -> bool:
        try:
            self.backend.head(pathname)
            return True
        except Exception:
            return False

    def list(self, prefix: str) -> List[str]:
        try:
            return self.backend.list(prefix)
        except Exception as e:
            logger.error("Listing object storage failed for prefix %s: %s", prefix, e)
            return []

    def health_check(self) -> bool:
        try:
            return bool(self.backend.ping())
        except Exception:
            return False
