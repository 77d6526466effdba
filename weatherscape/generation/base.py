"""
Abstract base class for background image generators.

All generation providers must inherit from this class and implement
the `generate()` method.
"""

from abc import ABC, abstractmethod


class GenerationError(Exception):
    """Raised when a provider cannot produce an image."""


class ImageGenerator(ABC):
    """
    Abstract base class for background image generators.

    Generation is the expensive, uncached path: callers are expected to
    consult the cache first and store whatever is returned.
    """

    @abstractmethod
    async def generate(
        self,
        city: str,
        condition: str,
        is_day: bool,
    ) -> str:
        """
        Generate a background for a city under a weather condition.

        Args:
            city: City name shown in the scene
            condition: Weather condition (e.g., 'Rain', 'Snow')
            is_day: True for a daytime scene, False for night

        Returns:
            str: Image reference (https URL or data URI)

        Raises:
            GenerationError: If no image could be produced
        """
        pass
