"""
Image encoding: turn a user-selected file into an inline data URL.

The result is an opaque string the codec stores as-is and a renderer can
display directly (``data:image/png;base64,...``).
"""

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from .config import Settings, settings as default_settings
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes]


def _guess_mime(source: ImageSource, mime_type: Optional[str]) -> str:
    if mime_type:
        return mime_type
    if not isinstance(source, bytes):
        guessed, _ = mimetypes.guess_type(str(source))
        if guessed:
            return guessed
    return "application/octet-stream"


def decode_image(data_url: str) -> bytes:
    """Raw bytes back out of a data URL produced by ImageEncoder."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise InvalidInputError("image", "not a base64 data URL")
    return base64.b64decode(payload)


class ImageEncoder:
    """
    Encodes images for diary entries, forum posts and profile avatars.

    Args:
        config: Settings (maximum image size)
    """

    def __init__(self, config: Settings = None):
        self.config = config or default_settings

    @property
    def max_bytes(self) -> int:
        return self.config.max_image_bytes

    def _check_size(self, size: int) -> None:
        if size == 0:
            raise InvalidInputError("image", "file is empty")
        if size > self.max_bytes:
            raise InvalidInputError("image", f"{size} bytes exceeds maximum ({self.max_bytes} bytes)")

    def _read(self, source: ImageSource) -> bytes:
        if isinstance(source, bytes):
            self._check_size(len(source))
            return source
        path = Path(source)
        # Reject oversize files before reading them into memory
        self._check_size(path.stat().st_size)
        return path.read_bytes()

    def encode_sync(self, source: ImageSource, mime_type: Optional[str] = None) -> str:
        """
        Encode image bytes or a file path as a data URL.

        Raises:
            InvalidInputError: If the image is empty or larger than ``max_image_bytes``
        """
        data = self._read(source)
        mime = _guess_mime(source, mime_type)
        encoded = base64.b64encode(data).decode("ascii")
        logger.debug(f"Encoded {len(data)} byte image as {mime}")
        return f"data:{mime};base64,{encoded}"

    async def encode(self, source: ImageSource, mime_type: Optional[str] = None) -> str:
        """Async wrapper: reads and encodes in a worker thread."""
        return await asyncio.to_thread(self.encode_sync, source, mime_type)

    def decode(self, data_url: str) -> bytes:
        return decode_image(data_url)


__all__ = ["ImageEncoder", "decode_image"]
