from __future__ import annotations

import base64
import binascii
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import ValidationError

MAX_SELFIE_SIDE = 1280


def decode_data_url(value: Optional[str]) -> Optional[bytes]:
    """Decode a ``data:image/...;base64,`` string as produced by a canvas capture."""

    if not value:
        return None
    _, sep, payload = value.partition(",")
    if not sep:
        payload = value
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Captured image could not be decoded")


def normalize_selfie(data: bytes) -> bytes:
    """Verify the upload is an image and re-encode it as a bounded-size PNG."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = img.convert("RGB")
            img.thumbnail((MAX_SELFIE_SIDE, MAX_SELFIE_SIDE))
            out = io.BytesIO()
            img.save(out, format="PNG")
            return out.getvalue()
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Selfie is not a valid image")
