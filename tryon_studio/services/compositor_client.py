"""Client for the try-on compositing endpoint."""

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import CompositorConfig
from ..errors import (
    EmptyResult,
    GenerationFailed,
    NoPersonDetected,
    NotAnImage,
    QuotaExceeded,
    Throttled,
)
from ..models import BackgroundMode, FitBand
from ..utils.images import decode_data_url, inspect_image

logger = logging.getLogger(__name__)


class CompositeResponse(BaseModel):
    """Body returned by the compositing endpoint, success or failure."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    image: str | None = None
    message: str | None = None
    error: str | None = None
    requires_new_image: bool = Field(default=False, alias="requiresNewImage")


class CompositorClient:
    """Sends one photo + product pair to the compositing endpoint."""

    def __init__(
        self,
        config: CompositorConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or CompositorConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            # Generation regularly takes 10-30s
            self._client = httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)
        return self._client

    async def check_connection(self) -> bool:
        """Verify the compositing service is up."""
        try:
            response = await self.client.get(f"{self.config.base_url.rstrip('/')}/health")
            return response.status_code == 200
        except httpx.TransportError:
            return False

    async def composite(
        self,
        user_image: str,
        product_image: str,
        product_name: str,
        background_mode: BackgroundMode = BackgroundMode.ORIGINAL,
        fit_preference: FitBand | None = None,
    ) -> tuple[bytes, str]:
        """Request a try-on composite.

        Args:
            user_image: The user's photo as a data URL
            product_image: The product photo as a data URL
            product_name: Display name of the product
            background_mode: Background treatment for the output
            fit_preference: Optional fit band hint

        Returns:
            (image bytes, media type)

        Raises:
            NoPersonDetected: the service found no person in the photo
            Throttled: rate limited (HTTP 429)
            QuotaExceeded: out of credits (HTTP 402)
            EmptyResult: success without an image
            GenerationFailed: any other failure
        """
        payload = {
            "userImage": user_image,
            "productImage": product_image,
            "productName": product_name,
            "backgroundMode": BackgroundMode(background_mode).value,
        }
        if fit_preference is not None:
            payload["fitPreference"] = FitBand(fit_preference).value

        try:
            response = await self.client.post(self.config.url, json=payload)
        except httpx.TransportError as e:
            logger.warning(f"Compositing request failed: {e!r}")
            raise GenerationFailed(f"transport error: {e}") from e

        body = self._parse_body(response)

        if body.requires_new_image:
            raise NoPersonDetected(body.error)
        if response.status_code == 429:
            raise Throttled(body.error)
        if response.status_code == 402:
            raise QuotaExceeded(body.error)
        if response.status_code >= 400:
            raise GenerationFailed(f"HTTP {response.status_code}: {body.error or response.text[:200]}")
        if body.error and not body.image:
            raise GenerationFailed(body.error)
        if not body.image:
            raise EmptyResult("response had no image")

        return await self._read_image(body.image)

    def _parse_body(self, response: httpx.Response) -> CompositeResponse:
        try:
            return CompositeResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            return CompositeResponse()

    async def _read_image(self, image: str) -> tuple[bytes, str]:
        if image.startswith(("http://", "https://")):
            try:
                response = await self.client.get(image)
            except httpx.TransportError as e:
                raise GenerationFailed(f"could not download result: {e}") from e
            if response.status_code >= 400:
                raise GenerationFailed(f"could not download result: HTTP {response.status_code}")
            data = response.content
        else:
            try:
                data, _ = decode_data_url(image)
            except NotAnImage as e:
                raise GenerationFailed(f"undecodable result image: {e}") from e

        if not data:
            raise EmptyResult("result image was empty")
        try:
            media_type, _, _ = inspect_image(data)
        except NotAnImage as e:
            raise GenerationFailed(f"result is not an image: {e}") from e
        return data, media_type

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
