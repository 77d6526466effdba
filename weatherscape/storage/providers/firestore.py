"""
Firestore remote store.

Talks to the Firestore REST API so the shared cache needs no native SDK.
Each cache key is one document in the configured collection.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from weatherscape.storage.core import RemoteStore

logger = logging.getLogger(__name__)

FIRESTORE_API = "https://firestore.googleapis.com/v1"


def encode_value(value: Any) -> Dict:
    """Encode a Python value as a Firestore REST value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {"timestampValue": value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")}
    return {"stringValue": str(value)}


def decode_value(value: Dict) -> Any:
    """Decode a Firestore REST value into a Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    return None


class FirestoreRemoteStore(RemoteStore):
    """
    Firestore document store backend.

    Reads and writes `{collection}/{cache_key}` documents. Errors are not
    handled here: the remote cache counts them against its circuit breaker.
    """

    def __init__(
        self,
        project_id: str,
        collection: str = "city_images",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Firestore store.

        Args:
            project_id: Google Cloud project id
            collection: Collection holding one document per cache key
            api_key: Optional web API key appended to every request
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        if not project_id:
            raise ValueError("Firestore project_id is required")

        self.project_id = project_id
        self.collection = collection
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _document_url(self, key: str) -> str:
        return (
            f"{FIRESTORE_API}/projects/{self.project_id}/databases/(default)"
            f"/documents/{self.collection}/{key}"
        )

    def _params(self) -> Dict[str, str]:
        return {"key": self.api_key} if self.api_key else {}

    async def get(self, key: str) -> Optional[Dict]:
        response = await self.client.get(self._document_url(key), params=self._params())
        if response.status_code == 404:
            return None
        response.raise_for_status()

        fields = response.json().get("fields", {})
        document = {name: decode_value(value) for name, value in fields.items()}
        logger.debug(f"Retrieved Firestore document: {self.collection}/{key}")
        return document

    async def set(self, key: str, document: Dict) -> None:
        body = {"fields": {name: encode_value(value) for name, value in document.items()}}
        response = await self.client.patch(
            self._document_url(key),
            params=self._params(),
            json=body,
        )
        response.raise_for_status()
        logger.info(f"Stored Firestore document: {self.collection}/{key}")

    async def aclose(self) -> None:
        await self.client.aclose()
