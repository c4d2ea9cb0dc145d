"""HTTP clients for remote images, the compositing endpoint and the AI gateway."""

from .image_fetcher import ImageFetcher
from .compositor_client import CompositorClient
from .gateway_client import GatewayClient, GatewayError, GatewayReply

__all__ = [
    "ImageFetcher",
    "CompositorClient",
    "GatewayClient",
    "GatewayError",
    "GatewayReply",
]
