"""Base classes and registry for external provider adapters.

Every third-party service the Art Director talks to (the OpenAI API, the
Unsplash and Pexels search APIs, arbitrary web pages) sits behind an adapter.
Adapters share one calling convention so that routes never touch HTTP
details and tests can swap any adapter for a fake.

Provider Adapter Pattern
------------------------
Each adapter encapsulates:
- Credential lookup from :class:`~artdirector.core.config.ArtDirectorConfig`
- Request construction for its provider
- Translation of upstream failures into :class:`ProviderError`
- Normalisation of the provider's payload into our own shapes

Provider Types
--------------
- **ai**: image generation, chat and vision models (OpenAI)
- **library**: stock photo search (Unsplash, Pexels)
- **web**: page fetching and image download

HTTP Client
-----------
Adapters accept an optional shared ``httpx.AsyncClient``.  The application
creates one client in its lifespan and hands it to every adapter; tests pass
a client built on ``httpx.MockTransport``.  Without a client, each request
opens a short-lived one.

Usage Example
-------------
    >>> from artdirector.core.provider_adapters import provider_registry
    >>> from artdirector.core.config import config
    >>>
    >>> provider_registry.list_available()
    ['openai', 'unsplash', 'pexels', 'web']
    >>> unsplash = provider_registry.instantiate("unsplash", config)
    >>> photos = await unsplash.search("mountain lake")

See Also
--------
- ArtDirectorConfig: Provider keys, base URLs and timeouts
- ProviderError: Error raised for every upstream failure
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx

from .config import ArtDirectorConfig
from .errors import ProviderError

logger = logging.getLogger(__name__)


def provider_error(provider_name: str, response: httpx.Response) -> ProviderError:
    """Build a :class:`ProviderError` from a non-2xx upstream response.

    The upstream status is kept.  The message is read from the usual error
    shapes (``{"error": {"message": ...}}``, ``{"error": "..."}``,
    ``{"errors": [...]}``); a body that is not JSON gives a generic message.
    """
    status = response.status_code
    try:
        payload = response.json()
    except ValueError:
        return ProviderError(
            f"{provider_name} returned an unexpected error ({status})",
            status_code=status,
            provider=provider_name,
        )

    message = ""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message") or ""
        elif isinstance(error, str):
            message = error
        errors = payload.get("errors")
        if not message and isinstance(errors, list) and errors:
            message = "; ".join(str(item) for item in errors)

    if not message:
        message = f"{provider_name} error ({status})"
    return ProviderError(f"{provider_name}: {message}", status_code=status, provider=provider_name)


class ProviderAdapterBase(ABC):
    """Abstract base class for all provider adapters.

    Attributes
    ----------
    name : str
        Registry key of the provider (e.g., "openai")
    label : str
        Human-readable provider name used in messages (e.g., "OpenAI")
    description : str
        Brief description of the provider's role
    provider_type : str
        Kind of service the adapter fronts
    config : ArtDirectorConfig
        Configuration holding keys, base URLs and timeouts

    Notes
    -----
    - Adapters never retry; a failure is reported once as ProviderError
    - Credentials are checked per call, so a key added to the environment
      only needs a config reload
    """

    name: str = "base"
    label: str = "Provider"
    description: str = "Base class for provider adapters"
    provider_type: Literal["ai", "library", "web"] = "ai"

    def __init__(
        self, config: ArtDirectorConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        """Initialize the provider adapter.

        Args:
            config: Configuration object
            client: Shared HTTP client; a temporary one is used per request if None
        """
        self.config = config
        self.client = client
        logger.debug(f"Initialized {self.label} adapter")

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials this provider needs are present."""

    def require_configured(self) -> None:
        """Raise a 500 ProviderError when the provider has no credentials."""
        if not self.is_configured:
            raise ProviderError(
                f"{self.label} API key not configured", status_code=500, provider=self.label
            )

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one HTTP request and return the 2xx response.

        Args:
            method: HTTP method
            url: Absolute URL
            **kwargs: Passed to ``httpx.AsyncClient.request``

        Returns
        -------
        httpx.Response
            The successful response

        Raises
        ------
        ProviderError
            Upstream non-2xx status (status propagated) or network failure (500)
        """
        kwargs.setdefault("timeout", self.config.request_timeout)
        try:
            if self.client is not None:
                response = await self.client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.label} request failed: {e}")
            raise ProviderError(
                f"{self.label} request failed: {e}", status_code=500, provider=self.label
            ) from e

        if response.is_error:
            error = provider_error(self.label, response)
            logger.error(f"{self.label} returned {response.status_code}: {error}")
            raise error
        return response

    @staticmethod
    def json_body(response: httpx.Response, label: str) -> Any:
        """Decode a successful response body, as ProviderError on failure."""
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{label} returned an invalid response", status_code=502, provider=label
            ) from e


class ProviderRegistry:
    """Registry for managing available provider adapters.

    Usage
    -----
        >>> provider_registry.register(MyProviderAdapter)
        >>> adapter = provider_registry.instantiate("my-provider", config)
        >>> provider_registry.list_by_type("library")
        ['unsplash', 'pexels']
    """

    def __init__(self) -> None:
        self._adapters: dict[str, type[ProviderAdapterBase]] = {}

    def register(self, adapter_class: type[ProviderAdapterBase]) -> None:
        """Register a provider adapter class under its ``name``."""
        adapter_name = adapter_class.name

        if adapter_name in self._adapters:
            logger.warning(f"Provider adapter '{adapter_name}' is already registered, overwriting")

        self._adapters[adapter_name] = adapter_class
        logger.debug(f"Registered provider adapter: {adapter_name}")

    def instantiate(
        self,
        adapter_name: str,
        config: ArtDirectorConfig,
        client: httpx.AsyncClient | None = None,
    ) -> ProviderAdapterBase:
        """Create an instance of a registered provider adapter.

        Raises
        ------
        KeyError
            If adapter_name is not registered
        """
        if adapter_name not in self._adapters:
            available = ", ".join(self.list_available())
            raise KeyError(
                f"Provider adapter '{adapter_name}' not found. Available adapters: {available}"
            )
        return self._adapters[adapter_name](config=config, client=client)

    def list_available(self) -> list[str]:
        return list(self._adapters.keys())

    def list_by_type(self, provider_type: str) -> list[str]:
        return [
            name
            for name, adapter_class in self._adapters.items()
            if adapter_class.provider_type == provider_type
        ]


# Global provider registry instance
provider_registry = ProviderRegistry()
