"""
Data Fetch Gateway — building metadata and recommended actions.

Behavioral Contract:
- Stateless request/response; one call per lookup.
- Every failure (transport, HTTP status, unknown building, malformed payload)
  surfaces as FetchError so callers have exactly one thing to catch.
"""

import logging
from typing import List, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from dashboard_kernel.models.building import ActionItem, BuildingMetadata

logger = logging.getLogger(__name__)

_ACTION_LIST = TypeAdapter(List[ActionItem])


class FetchError(Exception):
    """Raised when building metadata or actions cannot be fetched."""

    def __init__(self, building: str, message: str):
        super().__init__(f"{building}: {message}")
        self.building = building


class DataFetchGateway(Protocol):
    """
    Implementations raise FetchError for every lookup failure. The
    orchestrator still logs and absorbs anything else they raise.
    """

    async def fetch_building_metadata(self, name: str) -> BuildingMetadata:
        ...

    async def fetch_recommended_actions(self, name: str) -> List[ActionItem]:
        ...


class HttpDataFetchGateway:
    """
    Gateway over the building data REST service.

      GET {base_url}/buildings/{name}          -> BuildingMetadata
      GET {base_url}/buildings/{name}/actions  -> [ActionItem, ...]
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    def _url(self, name: str, suffix: str = "") -> str:
        return f"{self.base_url}/buildings/{quote(name, safe='')}{suffix}"

    async def _get_json(self, name: str, url: str):
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(name, f"request failed: {e}") from e

        if response.status_code == 404:
            raise FetchError(name, "building not found")
        if response.status_code >= 400:
            raise FetchError(name, f"service returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(name, "response was not valid JSON") from e

    async def fetch_building_metadata(self, name: str) -> BuildingMetadata:
        payload = await self._get_json(name, self._url(name))
        try:
            return BuildingMetadata.model_validate(payload)
        except ValidationError as e:
            raise FetchError(name, f"malformed building metadata: {e}") from e

    async def fetch_recommended_actions(self, name: str) -> List[ActionItem]:
        payload = await self._get_json(name, self._url(name, "/actions"))
        try:
            return _ACTION_LIST.validate_python(payload)
        except ValidationError as e:
            raise FetchError(name, f"malformed action list: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
