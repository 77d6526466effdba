"""
Background image generation module.

Provides factory function to create generation providers and registry
for extending with custom providers.

Usage:
    from weatherscape.generation import create_generator

    generator = create_generator(provider="fal", api_key="your_key")
    image_ref = await generator.generate("Tokyo", "Rain", False)
"""

import logging
from typing import Dict, Optional, Type

from weatherscape.generation.base import GenerationError, ImageGenerator
from weatherscape.generation.prompts import WeatherCondition, build_prompt
from weatherscape.generation.providers import (
    FalImageGenerator,
    MockImageGenerator,
)

logger = logging.getLogger(__name__)

# Registry of available providers
PROVIDERS: Dict[str, Type[ImageGenerator]] = {
    "fal": FalImageGenerator,
    "mock": MockImageGenerator,
}


def register_provider(name: str, provider_class: Type[ImageGenerator]) -> None:
    """
    Register a new generation provider.

    Custom providers must inherit from ImageGenerator.

    Example:
        class CustomGenerator(ImageGenerator):
            async def generate(self, city, condition, is_day):
                return "https://cdn.example.com/scene.png"

        register_provider("custom", CustomGenerator)
    """
    if name in PROVIDERS:
        logger.warning(f"Provider '{name}' already registered, overwriting")
    PROVIDERS[name] = provider_class
    logger.info(f"Registered provider: {name}")


def get_provider_class(name: str) -> Optional[Type[ImageGenerator]]:
    """Get a registered provider class by name."""
    return PROVIDERS.get(name.lower())


def create_generator(
    provider: str = "fal",
    api_key: Optional[str] = None,
    model_id: str = "fal-ai/nano-banana-pro",
    timeout: int = 120,
    **kwargs,
) -> ImageGenerator:
    """
    Factory function to create a generation provider.

    Args:
        provider: Which provider to use ('fal', 'mock', or custom)
        api_key: fal.ai API key
        model_id: fal.ai model endpoint
        timeout: Request timeout
        **kwargs: Additional arguments passed to custom provider constructors

    Returns:
        Initialized provider instance (ImageGenerator subclass). Falls back to
        MockImageGenerator when the provider is unknown, misconfigured or
        fails to initialize.
    """
    def _mock_with_reason(reason: str) -> ImageGenerator:
        logger.warning(f"{reason}, using MockImageGenerator")
        return MockImageGenerator()

    provider_name = (provider or "fal").lower()
    provider_class = get_provider_class(provider_name)

    if provider_class is None:
        available = ", ".join(PROVIDERS.keys())
        return _mock_with_reason(
            f"Unknown generator provider '{provider_name}' (available: {available})"
        )

    if provider_name == "mock":
        logger.info("Using mock generation provider")
        return MockImageGenerator(**kwargs)

    if provider_name == "fal" and not api_key:
        return _mock_with_reason("fal.ai API key missing")

    logger.info(f"Using {provider_name} generation provider")

    try:
        if provider_name == "fal":
            return FalImageGenerator(
                api_key=api_key,
                model_id=model_id,
                timeout=timeout,
            )

        # Custom provider - pass all kwargs through
        return provider_class(**kwargs)

    except Exception as exc:
        logger.error(
            f"Failed to initialize '{provider_name}' generation provider: {exc}"
        )
        return _mock_with_reason("Initialization failed")


__all__ = [
    "create_generator",
    "register_provider",
    "get_provider_class",
    "ImageGenerator",
    "GenerationError",
    "WeatherCondition",
    "build_prompt",
    "PROVIDERS",
]
