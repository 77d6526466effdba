"""
fal.ai text-to-image generation provider.

Calls the synchronous fal.run endpoint and asks for inline image data so
the result does not depend on a short-lived CDN URL.
"""

import logging
from typing import Dict, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from weatherscape.generation.base import GenerationError, ImageGenerator
from weatherscape.generation.prompts import build_prompt

logger = logging.getLogger(__name__)


class FalImageGenerator(ImageGenerator):
    """
    Interfaces with the fal.ai model API.

    Produces a 9:16 isometric city scene and returns it as a data URI when
    fal sends inline data, or as a hosted URL otherwise.
    """

    def __init__(
        self,
        api_key: str,
        model_id: str = "fal-ai/nano-banana-pro",
        api_host: str = "https://fal.run",
        aspect_ratio: str = "9:16",
        output_format: str = "png",
        timeout: int = 120,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize fal.ai client.

        Args:
            api_key: fal.ai API key
            model_id: Model endpoint (e.g., 'fal-ai/nano-banana-pro')
            api_host: API host for synchronous runs
            aspect_ratio: Output aspect ratio
            output_format: Output image format
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        if not api_key:
            raise ValueError("fal.ai api_key is required")

        self.api_key = api_key
        self.model_id = model_id
        self.api_host = api_host.rstrip("/")
        self.aspect_ratio = aspect_ratio
        self.output_format = output_format
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def generate(self, city: str, condition: str, is_day: bool) -> str:
        """
        Generate a background with fal.ai.

        Transport errors are retried inside `_call_fal_api`; anything still
        failing afterwards becomes a GenerationError.
        """
        prompt = build_prompt(city, condition, is_day)
        logger.info(f"[fal.ai] Generating for {city} - {condition} ({'Day' if is_day else 'Night'})")

        try:
            result = await self._call_fal_api(prompt)
        except httpx.HTTPError as e:
            logger.error(f"[fal.ai] Error generating image: {e}")
            raise GenerationError(f"fal.ai request failed: {e}") from e
        except ValueError as e:
            logger.error(f"[fal.ai] Response is not JSON: {e}")
            raise GenerationError(f"Malformed fal.ai response: {e}") from e

        try:
            image_ref = self._extract_image_ref(result)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.error(f"[fal.ai] Unexpected response shape: {e}")
            raise GenerationError(f"Malformed fal.ai response: {e}") from e

        if not image_ref:
            logger.error("[fal.ai] No image data in response")
            raise GenerationError("No image data received")
        return image_ref

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_fal_api(self, prompt: str) -> Dict:
        """
        Internal method to call fal.ai with retry logic.

        Retries up to 3 times with exponential backoff for timeout/connection
        errors. HTTP error statuses are raised immediately.
        """
        response = await self.client.post(
            f"{self.api_host}/{self.model_id}",
            headers={
                "Authorization": f"Key {self.api_key}",
                "Accept": "application/json",
            },
            json={
                "prompt": prompt,
                "aspect_ratio": self.aspect_ratio,
                "num_images": 1,
                "output_format": self.output_format,
                "sync_mode": True,
            },
        )
        if response.status_code != 200:
            logger.error(f"[fal.ai] error {response.status_code}: {response.text}")
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _extract_image_ref(result: Dict) -> Optional[str]:
        images = result.get("images") or []
        if not images:
            return None
        image = images[0]

        if image.get("file_data"):
            content_type = image.get("content_type") or "image/png"
            logger.info("[fal.ai] Success: got inline image data")
            return f"data:{content_type};base64,{image['file_data']}"

        if image.get("url"):
            logger.info("[fal.ai] Success (URL mode)")
            return image["url"]

        return None
