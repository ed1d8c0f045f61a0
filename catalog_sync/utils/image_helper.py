import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class ImageHelper:

    allowed_mime_types = ("image/jpeg", "image/png", "image/webp", "image/gif")
    default_mime_type = "image/jpeg"

    extensions = {
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }

    def __init__(self, allowed_mime_types: tuple = None,
                 default_mime_type: str = None) -> None:
        if allowed_mime_types:
            self.allowed_mime_types = allowed_mime_types
        if default_mime_type:
            self.default_mime_type = default_mime_type

    @staticmethod
    def sniff_mime_type(data: bytes) -> Optional[str]:
        """Detect the image type from its leading bytes."""
        if not data:
            return None
        if data.startswith(b"\xff\xd8\xff"):
            return "image/jpeg"
        if data.startswith(b"\x89PNG\r\n\x1a\n"):
            return "image/png"
        if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
            return "image/webp"
        if data[:6] in (b"GIF87a", b"GIF89a"):
            return "image/gif"
        return None

    def describe_upload(self, sku: str, data: bytes) -> Tuple[str, str]:
        """
        Pick the filename and content type of an image upload.

        Unknown formats are sent as the default MIME type; the media host
        decides whether it accepts them.
        """
        mime_type = self.sniff_mime_type(data)
        if mime_type not in self.allowed_mime_types:
            logger.warning(
                f"Unrecognized image format for {sku}, sending as {self.default_mime_type}")
            mime_type = self.default_mime_type
        return f"{sku}.{self.extensions.get(mime_type, 'jpg')}", mime_type
