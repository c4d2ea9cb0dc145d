"""Unit tests for the body-size analyzer."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from tryon_studio.agents import SizeAnalyzer, parse_size_analysis
from tryon_studio.agents.size_analyzer import SIZING_QUESTION, SIZING_SYSTEM_PROMPT
from tryon_studio.config import GatewayConfig
from tryon_studio.services import GatewayClient, GatewayError


class TestParseSizeAnalysis:

    def test_json_reply(self):
        analysis = parse_size_analysis(json.dumps({
            "recommendedSize": "XL",
            "confidence": 92,
            "bodyType": "broad",
            "measurements": {"chest": "44-46 inches"},
            "fitAdvice": "XL for a regular fit.",
        }))

        assert analysis.recommended_size == "XL"
        assert analysis.confidence == 92
        assert analysis.body_type == "broad"
        assert analysis.measurements == {"chest": "44-46 inches"}

    def test_json_inside_markdown(self):
        text = 'Sure!\n```json\n{"recommendedSize": "S", "confidence": 80}\n```'

        analysis = parse_size_analysis(text)

        assert analysis.recommended_size == "S"
        assert analysis.confidence == 80

    def test_float_confidence_and_numeric_measurements(self):
        analysis = parse_size_analysis('{"recommendedSize": "L", "confidence": 87.6, "measurements": {"chest": 42}}')

        assert analysis.confidence == 88
        assert analysis.measurements == {"chest": "42"}

    def test_plain_text_reply(self):
        analysis = parse_size_analysis("Medium should fit well.")

        assert analysis.recommended_size == "M"
        assert analysis.confidence == 75
        assert analysis.fit_advice == "Medium should fit well."

    @pytest.mark.parametrize("text", [
        "{not valid json}",
        '{"recommendedSize": "M", "confidence": 250}',
        '{"measurements": "broad"}',
    ])
    def test_unparseable_reply(self, text):
        analysis = parse_size_analysis(text)

        assert analysis.recommended_size == "M"
        assert analysis.confidence == 70
        assert analysis.fit_advice == "Size M recommended as a safe starting point."


class TestSizeAnalyzer:

    @pytest.mark.asyncio
    async def test_uses_sizing_prompt(self):
        gateway = MagicMock()
        gateway.analyze_image = AsyncMock(return_value='{"recommendedSize": "L", "confidence": 90}')

        analysis = await SizeAnalyzer(gateway).analyze("data:image/png;base64,AAAA")

        assert analysis.recommended_size == "L"
        gateway.analyze_image.assert_awaited_once_with(
            SIZING_SYSTEM_PROMPT, SIZING_QUESTION, "data:image/png;base64,AAAA"
        )

    @pytest.mark.asyncio
    async def test_through_gateway(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "choices": [{"message": {"content": '{"recommendedSize": "S", "confidence": 77}'}}],
            })

        gateway = GatewayClient(GatewayConfig(), "test-key", transport=httpx.MockTransport(handler))

        analysis = await SizeAnalyzer(gateway).analyze("https://cdn.example/me.jpg")

        assert analysis.recommended_size == "S"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == GatewayConfig().text_model
        assert seen["body"]["messages"][0]["role"] == "system"
        await gateway.close()

    @pytest.mark.asyncio
    async def test_gateway_error_propagates(self):
        gateway = GatewayClient(
            GatewayConfig(),
            "test-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(402, text="credits")),
        )

        with pytest.raises(GatewayError) as exc_info:
            await SizeAnalyzer(gateway).analyze("https://cdn.example/me.jpg")

        assert exc_info.value.status_code == 402


class TestGatewayReplies:

    @pytest.mark.asyncio
    async def test_generate_image_reads_images(self):
        def handler(request):
            body = json.loads(request.content)
            assert body["modalities"] == ["image", "text"]
            assert body["messages"][0]["content"][1]["image_url"]["url"] == "data:a"
            return httpx.Response(200, json={"choices": [{"message": {
                "content": [{"type": "text", "text": "Done"}],
                "images": [{"type": "image_url", "image_url": {"url": "data:image/png;base64,OUT"}}],
            }}]})

        gateway = GatewayClient(GatewayConfig(), "k", transport=httpx.MockTransport(handler))

        reply = await gateway.generate_image("prompt", ["data:a", "data:b"])

        assert reply.text == "Done"
        assert reply.image == "data:image/png;base64,OUT"

    @pytest.mark.asyncio
    async def test_unreachable_gateway(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        gateway = GatewayClient(GatewayConfig(), "k", transport=httpx.MockTransport(handler))

        with pytest.raises(GatewayError) as exc_info:
            await gateway.generate_image("prompt", [])

        assert exc_info.value.status_code == 502
