"""
Tests for background generation providers.

Verifies that:
1. The factory falls back to the mock provider when fal.ai is unusable
2. Prompts carry the city, weather details and lighting
3. fal.ai responses are turned into data URIs or URLs, and failures into
   GenerationError
"""

import asyncio
import json

import httpx
import pytest

from weatherscape.generation import (
    PROVIDERS,
    GenerationError,
    ImageGenerator,
    build_prompt,
    create_generator,
    register_provider,
)
from weatherscape.generation.prompts import weather_prompt
from weatherscape.generation.providers import FalImageGenerator, MockImageGenerator


def fal_with(handler) -> FalImageGenerator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FalImageGenerator(api_key="test-key", client=client)


class TestFactory:
    """Test provider selection."""

    def test_mock_provider(self):
        assert isinstance(create_generator(provider="mock"), MockImageGenerator)

    def test_fal_without_key_falls_back_to_mock(self):
        assert isinstance(create_generator(provider="fal", api_key=None), MockImageGenerator)

    def test_unknown_provider_falls_back_to_mock(self):
        assert isinstance(create_generator(provider="dalle"), MockImageGenerator)

    def test_fal_with_key(self):
        generator = create_generator(provider="FAL", api_key="secret", model_id="fal-ai/custom")

        assert isinstance(generator, FalImageGenerator)
        assert generator.model_id == "fal-ai/custom"

    def test_register_custom_provider(self):
        class StaticGenerator(ImageGenerator):
            def __init__(self, image_ref="https://cdn.test/static.png"):
                self.image_ref = image_ref

            async def generate(self, city, condition, is_day):
                return self.image_ref

        register_provider("static", StaticGenerator)
        try:
            generator = create_generator(provider="static", image_ref="https://cdn.test/s.png")
            assert asyncio.run(generator.generate("Rome", "Clear", True)) == "https://cdn.test/s.png"
        finally:
            PROVIDERS.pop("static", None)

    def test_fal_requires_key(self):
        with pytest.raises(ValueError):
            FalImageGenerator(api_key="")


class TestPrompts:
    """Test prompt construction."""

    def test_prompt_mentions_city_and_weather(self):
        prompt = build_prompt("Tokyo", "Rain", False)

        assert "City name: Tokyo" in prompt
        assert "wet surfaces with reflections" in prompt
        assert "night scene" in prompt

    def test_condition_lookup_is_case_insensitive(self):
        assert weather_prompt("snow", True) == weather_prompt("SNOW", True)
        assert "bright daylight" in weather_prompt("snow", True)

    def test_unknown_condition_passes_through(self):
        assert weather_prompt("Sandstorm", True).startswith("sandstorm, ")


class TestMockGenerator:
    """Test the development generator."""

    def test_deterministic_placeholder(self):
        generator = MockImageGenerator()

        first = asyncio.run(generator.generate("New York", "Rain", True))
        second = asyncio.run(generator.generate("New York", "Rain", False))

        assert first == "https://picsum.photos/seed/New%20YorkRain/1080/1920"
        assert first == second
        assert generator.calls == 2


class TestFalGenerator:
    """Test the fal.ai provider against a mocked API."""

    def test_inline_file_data_becomes_data_uri(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"images": [{"file_data": "iVBORw0KGgo=", "content_type": "image/png"}]},
            )

        image_ref = asyncio.run(fal_with(handler).generate("Tokyo", "Rain", False))

        assert image_ref == "data:image/png;base64,iVBORw0KGgo="
        assert seen["url"] == "https://fal.run/fal-ai/nano-banana-pro"
        assert seen["auth"] == "Key test-key"
        assert seen["body"]["aspect_ratio"] == "9:16"
        assert seen["body"]["num_images"] == 1
        assert seen["body"]["sync_mode"] is True
        assert "Tokyo" in seen["body"]["prompt"]

    def test_url_response(self):
        def handler(request):
            return httpx.Response(200, json={"images": [{"url": "https://fal.media/files/x.png"}]})

        image_ref = asyncio.run(fal_with(handler).generate("Tokyo", "Rain", False))

        assert image_ref == "https://fal.media/files/x.png"

    def test_empty_response_raises(self):
        generator = fal_with(lambda request: httpx.Response(200, json={"images": []}))

        with pytest.raises(GenerationError, match="No image data"):
            asyncio.run(generator.generate("Tokyo", "Rain", False))

    def test_non_json_body_raises_generation_error(self):
        generator = fal_with(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(GenerationError, match="Malformed"):
            asyncio.run(generator.generate("Tokyo", "Rain", False))

    @pytest.mark.parametrize("body", [["not", "a", "dict"], {"images": ["not-a-dict"]}, {"images": 5}])
    def test_unexpected_json_shape_raises_generation_error(self, body):
        generator = fal_with(lambda request: httpx.Response(200, json=body))

        with pytest.raises(GenerationError):
            asyncio.run(generator.generate("Tokyo", "Rain", False))

    def test_error_status_raises_without_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"detail": "boom"})

        with pytest.raises(GenerationError):
            asyncio.run(fal_with(handler).generate("Tokyo", "Rain", False))
        assert len(calls) == 1, "HTTP error statuses are not retried"
