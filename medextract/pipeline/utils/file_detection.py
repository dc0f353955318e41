"""
Image type detection using magic bytes.

Magic bytes reference:
- JPEG: 0xFFD8FF
- PNG:  0x89504E47 (89 P N G)
"""

import base64
from typing import Final, Literal, Optional

ImageMimeType = Literal["image/png", "image/jpeg"]

MAGIC_BYTES_MAP: Final[dict[bytes, ImageMimeType]] = {
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"\xff\xd8\xff": "image/jpeg",
}


def detect_image_mime_type(header: bytes) -> Optional[ImageMimeType]:
    """
    Detect the image MIME type from the first bytes of a file.

    Example:
        >>> detect_image_mime_type(b"\\x89PNG\\r\\n\\x1a\\n...")
        'image/png'
    """
    for signature, mime_type in MAGIC_BYTES_MAP.items():
        if header.startswith(signature):
            return mime_type
    return None


def encode_base64(data: bytes) -> str:
    """Standard base64 text, as expected by inline_data and image.content."""
    return base64.b64encode(data).decode("ascii")
