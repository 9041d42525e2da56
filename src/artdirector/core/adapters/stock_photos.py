"""Stock photo library adapters (Unsplash, Pexels).

Both adapters return results normalised to the same ``LibraryPhoto`` dict::

    {"id", "url", "thumb", "author", "authorUrl", "downloadUrl",
     "description", "colors"}

Searches ask for landscape orientation and
``config.library_results_per_page`` results.
"""

import logging
from abc import abstractmethod
from typing import Any

from ..provider_adapters import ProviderAdapterBase, provider_registry

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"


class StockPhotoAdapter(ProviderAdapterBase):
    """Common search flow for stock photo providers."""

    provider_type = "library"

    @abstractmethod
    async def fetch_results(self, query: str) -> list[dict[str, Any]]:
        """Return the provider's raw photo objects for *query*."""

    @staticmethod
    @abstractmethod
    def normalize(photo: dict[str, Any]) -> dict[str, Any]:
        """Map one raw photo object to a LibraryPhoto dict."""

    async def search(self, query: str) -> list[dict[str, Any]]:
        """Search the library.

        Raises:
            ProviderError: Missing key (500) or upstream failure.
        """
        self.require_configured()
        logger.info(f"Searching {self.label} for {query!r}")
        photos = [self.normalize(photo) for photo in await self.fetch_results(query)]
        logger.info(f"{self.label} returned {len(photos)} photo(s)")
        return photos


class UnsplashAdapter(StockPhotoAdapter):
    name = "unsplash"
    label = "Unsplash"
    description = "Unsplash photo search"

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured("unsplash")

    async def fetch_results(self, query: str) -> list[dict[str, Any]]:
        response = await self.request(
            "GET",
            f"{self.config.unsplash_base_url.rstrip('/')}/search/photos",
            params={
                "query": query,
                "per_page": self.config.library_results_per_page,
                "orientation": "landscape",
                "client_id": self.config.unsplash_access_key,
            },
        )
        payload = self.json_body(response, self.label)
        return (payload.get("results") or []) if isinstance(payload, dict) else []

    @staticmethod
    def normalize(photo: dict[str, Any]) -> dict[str, Any]:
        urls = photo.get("urls") or {}
        user = photo.get("user") or {}
        return {
            "id": photo.get("id"),
            "url": urls.get("regular"),
            "thumb": urls.get("small"),
            "author": user.get("name"),
            "authorUrl": (user.get("links") or {}).get("html"),
            "downloadUrl": (photo.get("links") or {}).get("download_location"),
            "description": photo.get("description") or photo.get("alt_description") or NO_DESCRIPTION,
            "colors": [photo["color"]] if photo.get("color") else [],
        }


class PexelsAdapter(StockPhotoAdapter):
    name = "pexels"
    label = "Pexels"
    description = "Pexels photo search"

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured("pexels")

    async def fetch_results(self, query: str) -> list[dict[str, Any]]:
        response = await self.request(
            "GET",
            f"{self.config.pexels_base_url.rstrip('/')}/search",
            params={
                "query": query,
                "per_page": self.config.library_results_per_page,
                "orientation": "landscape",
            },
            headers={"Authorization": self.config.pexels_api_key or ""},
        )
        payload = self.json_body(response, self.label)
        return (payload.get("photos") or []) if isinstance(payload, dict) else []

    @staticmethod
    def normalize(photo: dict[str, Any]) -> dict[str, Any]:
        src = photo.get("src") or {}
        return {
            "id": photo.get("id"),
            "url": src.get("large"),
            "thumb": src.get("medium"),
            "author": photo.get("photographer"),
            "authorUrl": photo.get("photographer_url"),
            "downloadUrl": src.get("original"),
            "description": photo.get("alt") or NO_DESCRIPTION,
            "colors": [photo["avg_color"]] if photo.get("avg_color") else [],
        }


provider_registry.register(UnsplashAdapter)
provider_registry.register(PexelsAdapter)
