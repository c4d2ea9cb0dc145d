"""Tests for remote image fetching."""

import httpx
import pytest

from tryon_studio.config import FetchConfig
from tryon_studio.errors import InvalidUrl, NetworkBlocked, NotAnImage
from tryon_studio.services import ImageFetcher


class ChunkSource:
    """Async byte stream that records how much of it was consumed."""

    def __init__(self, chunk: bytes, count: int):
        self.chunk = chunk
        self.count = count
        self.sent = 0

    async def __aiter__(self):
        for _ in range(self.count):
            self.sent += len(self.chunk)
            yield self.chunk


def make_fetcher(handler, max_bytes=1024) -> ImageFetcher:
    return ImageFetcher(FetchConfig(max_bytes=max_bytes), transport=httpx.MockTransport(handler))


class TestFetch:

    @pytest.mark.asyncio
    async def test_image_is_returned_with_media_type(self, image_transport, png_bytes):
        fetcher = ImageFetcher(transport=image_transport)

        data, media_type = await fetcher.fetch("  https://cdn.example/photo.png ")

        assert data == png_bytes
        assert media_type == "image/png"
        await fetcher.close()

    @pytest.mark.asyncio
    async def test_browser_headers_are_sent(self, png_bytes):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})

        await make_fetcher(handler).fetch("https://shop.example/img/shirt.png")

        assert seen["referer"] == "https://shop.example/"
        assert seen["user-agent"].startswith("Mozilla/5.0")

    @pytest.mark.asyncio
    async def test_streamed_body_over_limit_stops_early(self):
        source = ChunkSource(b"\x89" * 256, count=1000)

        def handler(request):
            return httpx.Response(200, content=source, headers={"content-type": "image/png"})

        with pytest.raises(NotAnImage, match="larger than 1024"):
            await make_fetcher(handler).fetch("https://cdn.example/huge.png")

        assert source.sent <= 1024 + 256

    @pytest.mark.asyncio
    async def test_declared_length_over_limit_is_rejected_unread(self):
        source = ChunkSource(b"\x89" * 256, count=8)

        def handler(request):
            return httpx.Response(
                200,
                content=source,
                headers={"content-type": "image/png", "content-length": "2048"},
            )

        with pytest.raises(NotAnImage):
            await make_fetcher(handler).fetch("https://cdn.example/huge.png")

        assert source.sent == 0

    @pytest.mark.asyncio
    async def test_body_at_limit_is_accepted(self):
        source = ChunkSource(b"\x89" * 256, count=4)

        def handler(request):
            return httpx.Response(200, content=source, headers={"content-type": "image/png"})

        data, _ = await make_fetcher(handler).fetch("https://cdn.example/exact.png")

        assert len(data) == 1024

    @pytest.mark.asyncio
    async def test_empty_body_is_not_an_image(self):
        def handler(request):
            return httpx.Response(200, content=b"", headers={"content-type": "image/png"})

        with pytest.raises(NotAnImage, match="empty"):
            await make_fetcher(handler).fetch("https://cdn.example/empty.png")

    @pytest.mark.asyncio
    async def test_html_page_is_not_an_image(self, image_transport):
        with pytest.raises(NotAnImage):
            await ImageFetcher(transport=image_transport).fetch("https://shop.example/page.html")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["https://blocked.example/photo.png", "https://cdn.example/missing"])
    async def test_unreachable(self, image_transport, url):
        with pytest.raises(NetworkBlocked):
            await ImageFetcher(transport=image_transport).fetch(url)

    @pytest.mark.asyncio
    async def test_read_error_mid_stream_is_network_blocked(self):
        class Broken:
            async def __aiter__(self):
                yield b"\x89PNG"
                raise httpx.ReadError("connection reset")

        def handler(request):
            return httpx.Response(200, content=Broken(), headers={"content-type": "image/png"})

        with pytest.raises(NetworkBlocked):
            await make_fetcher(handler).fetch("https://cdn.example/photo.png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "javascript:alert(1)", "//cdn.example/photo.png"])
    async def test_invalid_url(self, url):
        with pytest.raises(InvalidUrl):
            await ImageFetcher().fetch(url)
