"""
Client-side serving of generated backgrounds.

Provides:
- ServingResilienceLoop: Retry / regenerate supervision per displayed image
- DeliveryChannel, HttpDeliveryChannel: Materialize image references
- fallback_gradient: Static visual independent of the cache
"""

from weatherscape.serving.delivery import (
    DeliveryChannel,
    DeliveryError,
    HttpDeliveryChannel,
)
from weatherscape.serving.fallback import fallback_gradient
from weatherscape.serving.loop import RenderState, RenderStatus, ServingResilienceLoop

__all__ = [
    "ServingResilienceLoop",
    "RenderState",
    "RenderStatus",
    "DeliveryChannel",
    "DeliveryError",
    "HttpDeliveryChannel",
    "fallback_gradient",
]
