"""Remote sync of player inventories over HTTP.

The serialized ledger is base64-encoded and stored in a single named field
(settings.REMOTE_SYNC_FIELD, "Inventory" by default) of a per-player category
named after the save key:

    POST {base_url}/categories/{key}                 {"Inventory": "<base64>"}
    GET  {base_url}/categories/{key}/fields/Inventory

The download response is either the field object itself, {"Inventory": "..."},
or the field object nested under the category name, {"aliceInventory":
{"Inventory": "..."}}. Both layouts are accepted.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any
from urllib.parse import quote

import httpx

from satchel.conf import settings

logger = logging.getLogger(__name__)


class RemoteSyncError(Exception):
    """Raised when uploading or downloading an inventory fails.

    Attributes:
        key: Save key of the inventory being synced.
        payload: Request body that was sent, if any (for upload failures).
    """

    def __init__(self, message: str, key: str, payload: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.payload = payload


def encode_payload(text: str) -> str:
    """Base64-encode serialized ledger text for transport."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_payload(data: str) -> str:
    """Decode a base64 transport value back into serialized ledger text.

    Raises:
        ValueError: If the value is not valid base64-encoded UTF-8.
    """
    try:
        return base64.b64decode(data.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        msg = f"Invalid inventory payload: {e}"
        raise ValueError(msg) from e


class RemoteInventoryStore:
    """A client for the remote inventory sync service."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        field: str | None = None,
        timeout_s: float | None = None,
        authorization: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Service root. Defaults to settings.REMOTE_SYNC_URL.
            field: Name of the field holding the inventory. Defaults to settings.REMOTE_SYNC_FIELD.
            timeout_s: Request timeout. Defaults to settings.REMOTE_SYNC_TIMEOUT.
            authorization: Optional Authorization header value.
            transport: Optional httpx transport (tests pass an httpx.MockTransport).
        """
        self._base_url = (base_url if base_url is not None else settings.REMOTE_SYNC_URL).rstrip("/")
        self.field = field or settings.REMOTE_SYNC_FIELD
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.REMOTE_SYNC_TIMEOUT)
        self._authorization = str(authorization or "").strip()
        self._transport = transport

    @property
    def enabled(self) -> bool:
        """Whether a service URL is configured."""
        return bool(self._base_url)

    def _client(self) -> httpx.AsyncClient:
        headers: dict[str, str] = {}
        if self._authorization:
            headers["Authorization"] = self._authorization
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self.timeout_s,
            transport=self._transport,
        )

    @staticmethod
    def _category_path(key: str) -> str:
        """Build the category path for key, escaping every reserved URL character."""
        return f"/categories/{quote(key, safe='')}"

    async def upload(self, key: str, text: str) -> None:
        """Upload serialized inventory text under key.

        Raises:
            RemoteSyncError: If the request failed. The error carries the payload sent.
        """
        payload = {self.field: encode_payload(text)}
        try:
            async with self._client() as client:
                response = await client.post(self._category_path(key), json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Uploading inventory %s failed: %s", key, e)
            msg = f"Uploading inventory {key} failed: {e}"
            raise RemoteSyncError(msg, key, payload) from e

        logger.info("Uploaded inventory %s", key)

    async def download(self, key: str) -> str:
        """Download the serialized inventory text saved under key.

        Raises:
            RemoteSyncError: If the request failed or the response held no usable inventory.
        """
        try:
            async with self._client() as client:
                response = await client.get(f"{self._category_path(key)}/fields/{quote(self.field, safe='')}")
                response.raise_for_status()
                decoded = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Downloading inventory %s failed: %s", key, e)
            msg = f"Downloading inventory {key} failed: {e}"
            raise RemoteSyncError(msg, key) from e

        encoded = self._extract_field(decoded, key)
        if encoded is None:
            msg = f"Response for {key} has no '{self.field}' field"
            raise RemoteSyncError(msg, key)

        try:
            text = decode_payload(encoded)
        except ValueError as e:
            msg = f"Downloading inventory {key} failed: {e}"
            raise RemoteSyncError(msg, key) from e

        logger.info("Downloaded inventory %s", key)
        return text

    def _extract_field(self, decoded: Any, key: str) -> str | None:  # noqa: ANN401
        """Find the inventory field in either response layout."""
        if not isinstance(decoded, dict):
            return None
        category = decoded.get(key)
        if isinstance(category, dict):
            decoded = category
        value = decoded.get(self.field)
        return value if isinstance(value, str) else None
