"""OpenAI-compatible AI gateway client used by the compositing API."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import GatewayConfig

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Gateway call failed. ``status_code`` is the upstream HTTP status (502 if unreachable)."""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"gateway returned {status_code}: {detail}"[:500])


@dataclass
class GatewayReply:
    """First choice of a chat completion."""
    text: str
    images: list[str]

    @property
    def image(self) -> str | None:
        return self.images[0] if self.images else None


def parse_reply(data: dict[str, Any]) -> GatewayReply:
    """Pull text and image URLs out of a chat completion body."""
    choices = data.get("choices") or []
    message = (choices[0] or {}).get("message", {}) if choices else {}

    content = message.get("content") or ""
    if isinstance(content, list):
        # Some models return content parts instead of a plain string
        content = "".join(part.get("text", "") for part in content if isinstance(part, dict))

    images = []
    for item in message.get("images") or []:
        url = (item.get("image_url") or {}).get("url") if isinstance(item, dict) else None
        if url:
            images.append(url)

    return GatewayReply(text=content, images=images)


class GatewayClient:
    """Client for chat completions with image input and image output."""

    def __init__(
        self,
        config: GatewayConfig,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)
        return self._client

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        modalities: list[str] | None = None,
    ) -> GatewayReply:
        """Run a chat completion and return its first choice."""
        payload: dict[str, Any] = {"model": model, "messages": messages}
        if modalities:
            payload["modalities"] = modalities

        try:
            response = await self.client.post(
                self.config.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
        except httpx.TransportError as e:
            logger.error(f"Gateway unreachable: {e!r}")
            raise GatewayError(502, str(e)) from e

        if response.status_code != 200:
            logger.warning(f"Gateway returned {response.status_code} for {model}")
            raise GatewayError(response.status_code, response.text[:500])

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(502, "gateway returned invalid JSON") from e
        return parse_reply(data)

    async def generate_image(self, prompt: str, image_urls: list[str]) -> GatewayReply:
        """Ask the image model to edit/compose the given images."""
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend({"type": "image_url", "image_url": {"url": url}} for url in image_urls)
        return await self.chat(
            self.config.image_model,
            [{"role": "user", "content": content}],
            modalities=["image", "text"],
        )

    async def analyze_image(self, system_prompt: str, question: str, image_url: str) -> str:
        """Ask the text model a question about one image."""
        reply = await self.chat(
            self.config.text_model,
            [
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": question},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
        )
        return reply.text

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
