"""
Image generation providers.

Each provider implements the ImageGenerator interface and can be registered
with the factory function for dynamic provider selection.
"""

from weatherscape.generation.providers.fal import FalImageGenerator
from weatherscape.generation.providers.mock import MockImageGenerator

__all__ = ["FalImageGenerator", "MockImageGenerator"]
