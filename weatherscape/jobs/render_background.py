"""
Resolve a background and supervise its delivery until it is displayed.

Useful for warming the cache for a city and for checking that a cached
image still loads (expired URLs are regenerated on the way).

    python -m weatherscape.jobs.render_background --city Tokyo --condition Rain --night
"""

import argparse
import asyncio
import logging

from weatherscape.serving import HttpDeliveryChannel, RenderState, RenderStatus, ServingResilienceLoop
from weatherscape.services.background import create_background_service
from weatherscape.settings import settings
from weatherscape.storage.core import describe_ref

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def log_status(status: RenderStatus) -> None:
    logger.info(
        "Status | key=%s state=%s attempt=%s image=%s",
        status.key,
        status.state.value,
        status.attempt,
        describe_ref(status.image_ref),
    )


async def render(city: str, condition: str, is_day: bool) -> RenderStatus:
    service = create_background_service(settings)
    delivery = HttpDeliveryChannel(timeout=settings.serving.delivery_timeout_seconds)
    loop = ServingResilienceLoop(
        service,
        delivery,
        max_retries=settings.serving.max_retries,
        retry_delays=settings.serving.retry_delays,
        on_change=log_status,
    )
    try:
        loop.show(city, condition, is_day)
        status = await loop.wait()
    finally:
        await delivery.aclose()
        await service.aclose()

    if status.state is RenderState.FALLBACK:
        logger.warning("Showing fallback gradient %s", ", ".join(loop.fallback))
    return status


def main():
    parser = argparse.ArgumentParser(description="Render a cached AI city background")
    parser.add_argument("--city", type=str, required=True, help="City name, e.g. 'Tokyo'")
    parser.add_argument("--condition", type=str, required=True, help="Weather condition, e.g. 'Rain'")
    parser.add_argument("--night", action="store_true", help="Render the night variant")
    args = parser.parse_args()

    for issue in settings.validate():
        logger.warning(issue)

    status = asyncio.run(render(args.city, args.condition, not args.night))
    if status.state is not RenderState.LOADED:
        raise SystemExit(1)
    logger.info("Background ready | key=%s image=%s", status.key, describe_ref(status.image_ref))


if __name__ == "__main__":
    main()
