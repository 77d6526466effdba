"""
Delivery channels materialize an image reference for display.

A delivery either completes (the image is available and decodes) or raises
DeliveryError. The serving loop reacts to that signal; it cannot tell a
flaky CDN from an expired URL, so neither can this module.
"""

import base64
import binascii
import io
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from PIL import Image

from weatherscape.storage.core import describe_ref

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when an image reference could not be materialized."""


class DeliveryChannel(ABC):
    """Abstract base class for image delivery channels."""

    @abstractmethod
    async def deliver(self, image_ref: str) -> None:
        """
        Fetch and materialize an image.

        Raises:
            DeliveryError: If the image could not be loaded
        """
        pass


def verify_image(image_data: bytes) -> None:
    """Raise DeliveryError unless image_data is a decodable image."""
    try:
        with Image.open(io.BytesIO(image_data)) as image:
            image.verify()
    except Exception as e:
        raise DeliveryError(f"Invalid image data: {e}") from e


def decode_data_uri(image_ref: str) -> bytes:
    """Decode a base64 `data:` URI into bytes."""
    header, _, payload = image_ref.partition(",")
    if not payload or ";base64" not in header:
        raise DeliveryError("Unsupported data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DeliveryError(f"Corrupt data URI: {e}") from e


class HttpDeliveryChannel(DeliveryChannel):
    """
    Loads images from data URIs or over HTTP(S).

    Remote images are fetched with caching disabled so every retry really
    goes back to the network.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        verify: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            timeout: Download timeout in seconds
            verify: Decode the payload with Pillow to reject broken images
            client: Optional preconfigured httpx client
        """
        self.verify = verify
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self.last_image: Optional[bytes] = None

    async def deliver(self, image_ref: str) -> None:
        if not image_ref:
            raise DeliveryError("Empty image reference")

        if image_ref.startswith("data:"):
            image_data = decode_data_uri(image_ref)
        elif image_ref.startswith(("http://", "https://")):
            image_data = await self._download(image_ref)
        else:
            raise DeliveryError(f"Unsupported image reference: {describe_ref(image_ref)}")

        if self.verify:
            verify_image(image_data)

        self.last_image = image_data
        logger.info(f"[Image] Loaded successfully: {describe_ref(image_ref)}")

    async def _download(self, url: str) -> bytes:
        try:
            response = await self.client.get(
                url,
                headers={"Accept": "image/*", "Cache-Control": "no-cache"},
            )
        except httpx.HTTPError as e:
            raise DeliveryError(f"Failed to fetch {url}: {e}") from e

        if not response.is_success:
            raise DeliveryError(f"Failed to fetch {url}: HTTP {response.status_code}")
        return response.content

    async def aclose(self) -> None:
        await self.client.aclose()
