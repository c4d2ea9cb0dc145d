# Test fixtures and configuration
import asyncio
import io
import sys
from pathlib import Path

import httpx
import pytest
from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tryon_studio.capture.camera import CameraDevice, CameraStream, FacingMode, StreamConstraints
from tryon_studio.config import CameraConfig, CountdownConfig
from tryon_studio.errors import UnsupportedConstraints
from tryon_studio.models import CapturedImage, ImageSource, ProductReference
from tryon_studio.utils.images import to_data_url


class FakeStream(CameraStream):
    """In-memory stream producing solid-color frames."""

    def __init__(self, device: "FakeCamera", constraints: StreamConstraints):
        self.device = device
        self.constraints = constraints
        self.size = (constraints.width or 640, constraints.height or 480)
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def facing_mode(self) -> FacingMode:
        return self.constraints.facing_mode

    def read_frame(self):
        if not self._active or not self.device.frames_ready:
            return None
        return Image.new("RGB", self.size, color=(200, 30, 30))

    def stop(self) -> None:
        if self._active:
            self._active = False
            self.device.active_streams -= 1


class FakeCamera(CameraDevice):
    """Camera that enforces exclusive access like a real device.

    ``errors`` are raised by successive open() calls (None means succeed).
    """

    def __init__(self, errors=None, frames_ready=True, max_width=None):
        self.errors = list(errors or [])
        self.frames_ready = frames_ready
        self.max_width = max_width
        self.requests: list[StreamConstraints] = []
        self.streams: list[FakeStream] = []
        self.active_streams = 0
        self.max_active = 0
        self.gate: asyncio.Event | None = None

    async def open(self, constraints: StreamConstraints) -> CameraStream:
        self.requests.append(constraints)
        if self.gate is not None:
            await self.gate.wait()
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        if self.max_width and constraints.width and constraints.width > self.max_width:
            raise UnsupportedConstraints(f"max width is {self.max_width}")
        if self.active_streams:
            raise RuntimeError("device busy")

        stream = FakeStream(self, constraints)
        self.streams.append(stream)
        self.active_streams += 1
        self.max_active = max(self.max_active, self.active_streams)
        return stream


def make_image_bytes(fmt: str = "PNG", size=(4, 4), color=(0, 128, 255)) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", size, color=color).save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def png_bytes():
    """Small valid PNG image bytes."""
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", size=(8, 6))


@pytest.fixture
def temp_image_file(tmp_path, png_bytes):
    """Create a temporary PNG file."""
    img_path = tmp_path / "test_image.png"
    img_path.write_bytes(png_bytes)
    return img_path


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def camera_config():
    return CameraConfig(width=1280, height=720, facing_mode="user")


@pytest.fixture
def fast_countdown():
    return CountdownConfig(ticks=3, interval=0.01)


@pytest.fixture
def captured_image(jpeg_bytes):
    return CapturedImage(
        data=jpeg_bytes,
        media_type="image/jpeg",
        source=ImageSource.CAMERA,
        width=8,
        height=6,
    )


@pytest.fixture
def product(png_bytes):
    """Product whose image is already a data URL."""
    return ProductReference(
        id="1",
        name="Classic Black T-Shirt",
        image=to_data_url(png_bytes, "image/png"),
        brand="StyleCorp",
        price=29.99,
        category="clothing",
    )


@pytest.fixture
def image_transport(png_bytes):
    """MockTransport serving images by path: /photo.png, /page.html, /missing."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(".png"):
            return httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"})
        if request.url.path.endswith(".html"):
            return httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"})
        if request.url.host == "blocked.example":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(404)

    return httpx.MockTransport(handler)
