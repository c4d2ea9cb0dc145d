"""Remote image fetching for photo uploads by URL and product images."""

import logging
from urllib.parse import urlparse

import httpx

from ..config import FetchConfig
from ..errors import InvalidUrl, NetworkBlocked, NotAnImage

logger = logging.getLogger(__name__)


def validate_image_url(url: str) -> str:
    """Reject anything that isn't an absolute http(s) URL."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl("empty URL")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrl(f"not an http(s) URL: {url[:100]}")
    return url


class ImageFetcher:
    """Fetches images over HTTP and checks they really are images."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or FetchConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def fetch(self, url: str) -> tuple[bytes, str]:
        """Download an image.

        Returns:
            (image bytes, declared media type)

        Raises:
            InvalidUrl: malformed input
            NetworkBlocked: the resource couldn't be retrieved
            NotAnImage: the declared media type isn't an image, or the body
                is empty or larger than ``max_bytes``
        """
        url = validate_image_url(url)

        # Browser-like headers help with hotlink protection
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        headers = {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": origin + "/",
        }

        try:
            async with self.client.stream("GET", url, headers=headers) as response:
                if response.status_code >= 400:
                    logger.warning(f"Image fetch refused for {origin}: HTTP {response.status_code}")
                    raise NetworkBlocked(f"HTTP {response.status_code}")

                media_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
                if not media_type.startswith("image/"):
                    raise NotAnImage(f"declared media type is {media_type or 'missing'}")

                data = await self._read_limited(response)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidUrl(str(e)) from e
        except httpx.TransportError as e:
            logger.warning(f"Image fetch failed for {origin}: {e!r}")
            raise NetworkBlocked(str(e)) from e

        if not data:
            raise NotAnImage("empty response body")
        return data, media_type

    async def _read_limited(self, response: httpx.Response) -> bytes:
        """Read the body, giving up as soon as it exceeds ``max_bytes``."""
        limit = self.config.max_bytes
        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            raise NotAnImage(f"image is larger than {limit} bytes")

        chunks = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > limit:
                raise NotAnImage(f"image is larger than {limit} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
