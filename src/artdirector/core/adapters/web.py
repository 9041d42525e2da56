"""Web page fetching and image download.

Pages are fetched server-side with a browser User-Agent (many sites serve
bots an empty shell).  Any failure, whatever the page's own status, is
reported as a 500 since the target site is not the client's API.
"""

import logging

from ..errors import ProviderError
from ..provider_adapters import ProviderAdapterBase, provider_registry

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class WebPageFetcher(ProviderAdapterBase):
    """Fetches HTML pages and image bytes from arbitrary URLs."""

    name = "web"
    label = "Web"
    description = "Page fetching and image download"
    provider_type = "web"

    @property
    def is_configured(self) -> bool:
        return True

    async def fetch_html(self, url: str) -> str:
        """Return the HTML of *url*.

        Raises:
            ProviderError: 500 when the page cannot be fetched.
        """
        logger.info(f"Fetching page: {url}")
        try:
            response = await self.request(
                "GET",
                url,
                headers={"User-Agent": BROWSER_USER_AGENT},
                timeout=self.config.page_fetch_timeout,
                follow_redirects=True,
            )
        except ProviderError as e:
            raise ProviderError(
                f"Could not fetch the content of this page: {e}", status_code=500, provider=self.label
            ) from e

        html = response.text
        logger.info(f"Fetched {len(html)} characters from {url}")
        return html

    async def download(self, url: str) -> bytes:
        """Return the raw bytes at *url* (used for generated images).

        Raises:
            ProviderError: 500 when the download fails.
        """
        logger.info(f"Downloading image: {url}")
        try:
            response = await self.request("GET", url, follow_redirects=True)
        except ProviderError as e:
            raise ProviderError(
                f"Could not download the image: {e}", status_code=500, provider=self.label
            ) from e
        return response.content


provider_registry.register(WebPageFetcher)
