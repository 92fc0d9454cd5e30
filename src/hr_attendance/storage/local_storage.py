from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from ..core.exceptions import ValidationError
from .base import ObjectStorage

logger = logging.getLogger(__name__)


class LocalObjectStorage(ObjectStorage):
    """Stores objects under ``<root>/<bucket>/<key>`` and serves them via ``/storage``."""

    def __init__(self, root: str | Path, *, url_prefix: str = "/storage"):
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    @staticmethod
    def _clean_key(key: str) -> str:
        parts = PurePosixPath(key.replace("\\", "/")).parts
        if not parts or any(p in {"..", ""} for p in parts) or parts[0] == "/":
            raise ValidationError(f"Invalid storage key: {key!r}")
        return "/".join(parts)

    def path_for(self, bucket: str, key: str) -> Path:
        bucket = self._clean_key(bucket)
        return self._root / bucket / self._clean_key(key)

    def upload(self, bucket: str, key: str, data: bytes) -> None:
        path = self.path_for(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("stored %d bytes at %s/%s", len(data), bucket, key)

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._url_prefix}/{self._clean_key(bucket)}/{self._clean_key(key)}"
