"""Provider adapter implementations.

Importing this package registers every adapter with
:data:`artdirector.core.provider_adapters.provider_registry`.
"""

from .openai import OpenAIAdapter
from .stock_photos import PexelsAdapter, StockPhotoAdapter, UnsplashAdapter
from .web import WebPageFetcher

__all__ = [
    "OpenAIAdapter",
    "PexelsAdapter",
    "StockPhotoAdapter",
    "UnsplashAdapter",
    "WebPageFetcher",
]
