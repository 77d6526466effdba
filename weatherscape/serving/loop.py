"""
Serving resilience loop.

Supervises the delivery of one displayed background at a time:

    LOADING -> LOADED
    LOADING -> FAILED(n) -> (backoff) -> LOADING          while n < max_retries
    LOADING -> REGENERATING -> LOADING (new image ref)    once retries run out
    REGENERATING -> FALLBACK                              if regeneration fails

Transient CDN failures and expired URLs look the same from here, so they
are told apart only by exhausting the retries.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from weatherscape.serving.delivery import DeliveryChannel, DeliveryError
from weatherscape.serving.fallback import Gradient, fallback_gradient
from weatherscape.services.background import BackgroundService
from weatherscape.storage.core import ImageKey, describe_ref

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"
    REGENERATING = "regenerating"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RenderStatus:
    """Where the displayed image is in its lifecycle."""

    key: str
    state: RenderState
    attempt: int = 0
    image_ref: Optional[str] = None


class ServingResilienceLoop:
    """
    Displays backgrounds and recovers from delivery failures.

    Only one key is supervised at a time. Showing a new key cancels the
    previous supervision, including any pending retry timer; an in-flight
    generation for the old key still completes and lands in the cache.
    """

    def __init__(
        self,
        service: BackgroundService,
        delivery: DeliveryChannel,
        max_retries: int = 3,
        retry_delays: Sequence[float] = (1.5, 3.0, 5.0),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_change: Optional[Callable[[RenderStatus], None]] = None,
    ):
        if not retry_delays:
            raise ValueError("retry_delays must not be empty")

        self.service = service
        self.delivery = delivery
        self.max_retries = max_retries
        self.retry_delays = tuple(retry_delays)
        self.sleep = sleep
        self.on_change = on_change

        self.status: Optional[RenderStatus] = None
        self._selection: Optional[Tuple[str, str, bool]] = None
        self._task: Optional[asyncio.Task] = None
        self._last_good: Optional[str] = None

    def retry_delay(self, attempt: int) -> float:
        """Backoff before retry `attempt`; past the table, the last value."""
        return self.retry_delays[min(attempt, len(self.retry_delays) - 1)]

    def show(self, city: str, condition: str, is_day: bool) -> asyncio.Task:
        """
        Start displaying the background for a city/condition/time of day.

        Re-showing the same key keeps the current supervision running.

        Returns:
            asyncio.Task: The supervising task
        """
        key = ImageKey.generate(city, condition, is_day)
        if (
            self._task is not None
            and not self._task.done()
            and self.status is not None
            and self.status.key == key
        ):
            return self._task

        self.cancel()
        self._selection = (city, condition, is_day)
        self._set(RenderStatus(key=key, state=RenderState.LOADING))
        self._task = asyncio.create_task(self._supervise(key, city, condition, is_day))
        return self._task

    def cancel(self) -> None:
        """Stop supervising the current key. Pending retry timers never fire."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> Optional[RenderStatus]:
        """Wait until the currently shown key settles (LOADED or FALLBACK)."""
        while self._task is not None:
            task = self._task
            await asyncio.wait([task])
            if task is not self._task:
                continue
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()
            break
        return self.status

    @property
    def displayed_image(self) -> Optional[str]:
        """
        The image on screen: the last one that loaded, kept through retries
        and regeneration. None once the loop has given up.
        """
        if self.status is not None and self.status.state is RenderState.FALLBACK:
            return None
        return self._last_good

    @property
    def fallback(self) -> Gradient:
        """Static gradient drawn behind (or instead of) the image."""
        if self._selection is None:
            return fallback_gradient("", True)
        _, condition, is_day = self._selection
        return fallback_gradient(condition, is_day)

    def _set(self, status: RenderStatus) -> None:
        self.status = status
        logger.debug(
            f"[Image] {status.key}: {status.state.value} "
            f"(attempt {status.attempt}) {describe_ref(status.image_ref)}"
        )
        if self.on_change is not None:
            self.on_change(status)

    async def _supervise(self, key: str, city: str, condition: str, is_day: bool) -> None:
        try:
            image_ref = await self.service.get(city, condition, is_day)
        except Exception as e:
            logger.error(f"[Image] Could not resolve background for {key}: {e}")
            self._set(RenderStatus(key=key, state=RenderState.FALLBACK))
            return

        if not image_ref:
            self._set(RenderStatus(key=key, state=RenderState.FALLBACK))
            return

        attempt = 0
        regenerated = False
        while True:
            self._set(RenderStatus(key=key, state=RenderState.LOADING, attempt=attempt, image_ref=image_ref))
            try:
                await self.delivery.deliver(image_ref)
            except DeliveryError as e:
                logger.error(f"[Image] Failed to load {describe_ref(image_ref)}: {e} (retry {attempt})")
            else:
                self._last_good = image_ref
                self._set(RenderStatus(key=key, state=RenderState.LOADED, image_ref=image_ref))
                return

            if attempt < self.max_retries:
                delay = self.retry_delay(attempt)
                self._set(RenderStatus(key=key, state=RenderState.FAILED, attempt=attempt, image_ref=image_ref))
                logger.info(f"[Image] Retry {attempt + 1}/{self.max_retries} in {delay:g}s...")
                await self.sleep(delay)
                attempt += 1
                continue

            if regenerated:
                logger.error(f"[Image] Regenerated image for {key} failed to load as well")
                self._set(RenderStatus(key=key, state=RenderState.FALLBACK, attempt=attempt, image_ref=image_ref))
                return

            logger.warning(
                f"[Image] Max retries ({self.max_retries}) reached. URL expired - regenerating..."
            )
            regenerated = True
            self._set(RenderStatus(key=key, state=RenderState.REGENERATING, attempt=attempt, image_ref=image_ref))
            try:
                new_ref = await self.service.invalidate_and_regenerate(city, condition, is_day)
            except Exception as e:
                logger.error(f"[Image] Regeneration failed for {key}: {e}")
                self._set(RenderStatus(key=key, state=RenderState.FALLBACK, attempt=attempt, image_ref=image_ref))
                return

            if not new_ref:
                self._set(RenderStatus(key=key, state=RenderState.FALLBACK, attempt=attempt, image_ref=image_ref))
                return
            image_ref = new_ref
            attempt = 0
