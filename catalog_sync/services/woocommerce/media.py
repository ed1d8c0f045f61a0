"""WordPress media library client (image upload and binding)."""

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from catalog_sync.core.exceptions import MediaHostError
from catalog_sync.models.product_models import MediaObject
from catalog_sync.utils.image_helper import ImageHelper

__logger__ = logging.getLogger(__name__)


class WordPressMediaClient:
    """
    Client for the ``wp/v2/media`` endpoint.

    Images are uploaded as raw request bodies and bound afterwards to the
    product post they belong to.
    """

    def __init__(
        self,
        media_url: str,
        username: str = "",
        app_password: str = "",
        auth_header: str = "",
        cookie: str = "",
        timeout: int = 30,
        verify_ssl: bool = True,
        image_helper: Optional[ImageHelper] = None,
        session: Optional[requests.Session] = None,
    ):
        self.media_url = media_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.image_helper = image_helper or ImageHelper()
        self.session = session or requests.Session()
        if username and app_password:
            self.session.auth = (username, app_password)
        if auth_header:
            self.session.headers["Authorization"] = auth_header
        if cookie:
            self.session.headers["Cookie"] = cookie

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(
                method, url, timeout=self.timeout, verify=self.verify_ssl, **kwargs
            )
        except requests.RequestException as e:
            raise MediaHostError(f"Error while sending request to {url}: {e}") from e

    @staticmethod
    def _media_object(response: requests.Response, action: str) -> MediaObject:
        if not response.ok:
            raise MediaHostError(
                f"{action} failed ({response.status_code}): {response.text[:500]}",
                status_code=response.status_code,
            )
        try:
            return MediaObject.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MediaHostError(f"Unreadable {action.lower()} response: {e}") from e

    def upload_image(self, sku: str, data: bytes) -> MediaObject:
        """
        Upload one image to the media library.

        Args:
            sku: Product SKU, used as the file name
            data: Image bytes as stored in the source catalog

        Returns:
            MediaObject with the new media ID and its URL

        Raises:
            MediaHostError: If the upload is refused or unreadable
        """
        if not sku or not data:
            raise MediaHostError("Missing SKU or image data")

        filename, content_type = self.image_helper.describe_upload(sku, data)
        __logger__.debug(f"Uploading image {filename} ({len(data)} bytes) for product {sku}")
        response = self._send(
            "POST",
            self.media_url,
            data=data,
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Content-Type": content_type,
            },
        )
        return self._media_object(response, "Upload")

    def bind_image(self, media_id: int, remote_id: int) -> MediaObject:
        """Attach an uploaded media item to the product post ``remote_id``."""
        if media_id is None or remote_id is None:
            raise MediaHostError("Missing media ID or product ID")

        __logger__.debug(f"Binding image {media_id} to product {remote_id}")
        response = self._send(
            "POST",
            f"{self.media_url}/{media_id}",
            data={"post": remote_id},
        )
        return self._media_object(response, "Binding")

    def probe_connectivity(self) -> bool:
        try:
            response = self._send("GET", self.media_url, params={"per_page": 1})
        except MediaHostError as e:
            __logger__.error(f"WordPress connection test failed: {e}")
            return False
        if not response.ok:
            __logger__.error(
                f"WordPress connection test failed: {response.status_code} - {response.text[:500]}")
            return False
        return True
