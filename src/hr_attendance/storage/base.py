from __future__ import annotations

from typing import Protocol


class ObjectStorage(Protocol):
    """Bucket/key blob store with public-read URLs."""

    def upload(self, bucket: str, key: str, data: bytes) -> None:
        raise NotImplementedError

    def public_url(self, bucket: str, key: str) -> str:
        raise NotImplementedError
