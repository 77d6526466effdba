"""
Tests for the Firestore REST remote store.

Verifies that:
1. Missing documents are reported as None
2. Document fields are decoded into plain values
3. Writes PATCH the document with typed Firestore values
4. Other HTTP errors propagate to the remote cache
"""

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from weatherscape.storage import FirestoreRemoteStore, create_remote_store
from weatherscape.storage.providers.firestore import decode_value, encode_value


def store_with(handler) -> FirestoreRemoteStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreRemoteStore(project_id="weather-app", api_key="web-key", client=client)


class TestFirestoreReads:
    """Test document reads."""

    def test_missing_document(self):
        store = store_with(lambda request: httpx.Response(404, json={"error": {"code": 404}}))

        assert asyncio.run(store.get("tokyo_rain_night")) is None

    def test_document_fields_decoded(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(
                200,
                json={
                    "name": "projects/weather-app/databases/(default)/documents/city_images/tokyo_rain_night",
                    "fields": {
                        "url": {"stringValue": "https://cdn.test/tokyo.png"},
                        "city": {"stringValue": "Tokyo"},
                        "isDay": {"booleanValue": False},
                        "createdAt": {"timestampValue": "2025-01-01T00:00:00Z"},
                    },
                },
            )

        document = asyncio.run(store_with(handler).get("tokyo_rain_night"))

        assert document == {
            "url": "https://cdn.test/tokyo.png",
            "city": "Tokyo",
            "isDay": False,
            "createdAt": "2025-01-01T00:00:00Z",
        }
        assert seen["url"].path.endswith("/documents/city_images/tokyo_rain_night")
        assert seen["url"].params["key"] == "web-key"

    def test_server_error_propagates(self):
        store = store_with(lambda request: httpx.Response(503))

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(store.get("tokyo_rain_night"))


class TestFirestoreWrites:
    """Test document writes."""

    def test_set_patches_typed_fields(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        document = {
            "url": "https://cdn.test/tokyo.png",
            "isDay": True,
            "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc),
        }

        asyncio.run(store_with(handler).set("tokyo_rain_day", document))

        assert seen["method"] == "PATCH"
        assert seen["body"] == {
            "fields": {
                "url": {"stringValue": "https://cdn.test/tokyo.png"},
                "isDay": {"booleanValue": True},
                "createdAt": {"timestampValue": "2025-01-01T00:00:00Z"},
            }
        }


class TestValueCodec:
    """Test Firestore value encoding."""

    @pytest.mark.parametrize(
        "value,encoded",
        [
            (None, {"nullValue": None}),
            (False, {"booleanValue": False}),
            (7, {"integerValue": "7"}),
            (1.5, {"doubleValue": 1.5}),
            ("x", {"stringValue": "x"}),
        ],
    )
    def test_encode(self, value, encoded):
        assert encode_value(value) == encoded

    def test_decode_integer(self):
        assert decode_value({"integerValue": "42"}) == 42


class TestRemoteStoreFactory:
    """Test remote store selection."""

    def test_none_backend(self):
        assert create_remote_store("none") is None

    def test_firestore_without_project_is_disabled(self):
        assert create_remote_store("firestore", project_id=None) is None

    def test_firestore_with_project(self):
        assert isinstance(create_remote_store("firestore", project_id="weather-app"), FirestoreRemoteStore)
