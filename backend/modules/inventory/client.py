"""
Inventory API client for devices that do not host the item store
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, List, Optional
from urllib.parse import urljoin, urlsplit
from uuid import UUID

import requests
from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.errors import FieldError, TransportError, ValidationError
from .models import InventoryItem

logger = logging.getLogger(__name__)

LOCALHOST_IP = "127.0.0.1"
ZERO_ADDRESS = "0.0.0.0"
DEFAULT_HTTPS_PORT = 7229
DEFAULT_HTTP_PORT = 5055


def hub_url(base_url: str, hub_path: str) -> str:
    """
    Build the real-time endpoint URL for a server at `base_url`.
    Local hosts (localhost, 127.0.0.1, 0.0.0.0) are pinned to 127.0.0.1.
    """
    parts = urlsplit(base_url)
    host = (parts.hostname or "").lower()
    if host in ("localhost", LOCALHOST_IP, ZERO_ADDRESS):
        port = parts.port or (DEFAULT_HTTPS_PORT if parts.scheme == "https" else DEFAULT_HTTP_PORT)
        return f"{parts.scheme}://{LOCALHOST_IP}:{port}/{hub_path.lstrip('/')}"
    return urljoin(base_url if base_url.endswith("/") else base_url + "/", hub_path.lstrip("/"))


class ApiInventoryClient:
    """Item store backed by the inventory HTTP API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.INVENTORY_API_BASE_URL).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.INVENTORY_API_TIMEOUT
        self.headers = {'Accept': 'application/json'}
        # Socket.IO sid of this client's real-time connection, if any
        self.connection_id: Optional[str] = None

    def _make_request(self, endpoint: str, method: str = 'GET', json: Any = None) -> requests.Response:
        url = f"{self.base_url}/api/{endpoint}"
        headers = dict(self.headers)
        if self.connection_id:
            headers['X-Connection-Id'] = self.connection_id
        try:
            return self.session.request(method=method, url=url, headers=headers, json=json, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(f"Inventory API unreachable: {e}")

    @staticmethod
    def _check(response: requests.Response):
        if response.status_code == 422:
            raise ValidationError(_parse_field_errors(response))
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise TransportError(f"Inventory API error: {e}")

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from inventory API: {e}")

    # ---- Blocking calls ----
    def fetch_all(self) -> List[InventoryItem]:
        response = self._make_request('inventory')
        self._check(response)
        data = self._json(response)
        if not isinstance(data, list):
            raise TransportError("Inventory API returned a non-list for the item list")
        try:
            return [InventoryItem.model_validate(row) for row in data]
        except PydanticValidationError as e:
            raise TransportError(f"Malformed item in inventory list: {e}")

    def fetch_one(self, item_id: UUID) -> Optional[InventoryItem]:
        response = self._make_request(f'inventory/{item_id}')
        if response.status_code == 404:
            return None
        self._check(response)
        return _parse_item(self._json(response))

    def submit(self, item: InventoryItem) -> InventoryItem:
        response = self._make_request('inventory', method='POST', json=item.model_dump(mode='json'))
        self._check(response)
        return _parse_item(self._json(response))

    def delete(self, item_id: UUID) -> bool:
        response = self._make_request(f'inventory/{item_id}', method='DELETE')
        if response.status_code == 404:
            return False
        self._check(response)
        data = self._json(response)
        if not isinstance(data, dict):
            raise TransportError("Inventory API returned an unexpected remove result")
        return bool(data.get('removed'))

    # ---- Item store contract ----
    async def get_all(self) -> List[InventoryItem]:
        return await asyncio.to_thread(self.fetch_all)

    async def get_by_id(self, item_id: UUID) -> Optional[InventoryItem]:
        return await asyncio.to_thread(self.fetch_one, item_id)

    async def save(self, item: InventoryItem) -> InventoryItem:
        return await asyncio.to_thread(self.submit, item)

    async def upsert(self, item: InventoryItem) -> InventoryItem:
        return await self.save(item)

    async def remove(self, item_id: UUID) -> bool:
        return await asyncio.to_thread(self.delete, item_id)

    def close(self):
        self.session.close()


def _parse_item(data: Any) -> InventoryItem:
    try:
        return InventoryItem.model_validate(data)
    except PydanticValidationError as e:
        raise TransportError(f"Malformed item from inventory API: {e}")


def _parse_field_errors(response: requests.Response) -> List[FieldError]:
    try:
        body = response.json()
        return [FieldError(**e) for e in body.get('errors', [])]
    except (ValueError, TypeError, AttributeError, PydanticValidationError):
        return [FieldError(field='body', message=response.text or 'Validation failed')]
