"""
Mock generation provider for testing and development.

Returns a deterministic placeholder photo URL instead of calling an AI
backend.
"""

import asyncio
import logging
from urllib.parse import quote

from weatherscape.generation.base import ImageGenerator
from weatherscape.generation.prompts import build_prompt

logger = logging.getLogger(__name__)


class MockImageGenerator(ImageGenerator):
    """
    Mock image generator for testing/development.

    Returns a placeholder that looks good, simulating a successful generation.
    """

    def __init__(self, delay_seconds: float = 0.0, **kwargs):
        """
        Initialize mock generator.

        Args:
            delay_seconds: Simulated generation latency
            **kwargs: Ignored arguments (accepts any args for compatibility)
        """
        self.delay_seconds = delay_seconds
        self.calls = 0

    async def generate(self, city: str, condition: str, is_day: bool) -> str:
        self.calls += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        logger.info(
            f"Mock generator: {city} - {condition} ({'Day' if is_day else 'Night'})"
        )
        logger.debug(f"Mock generator prompt: {build_prompt(city, condition, is_day)}")

        seed = quote(f"{city}{condition}", safe="")
        return f"https://picsum.photos/seed/{seed}/1080/1920"
