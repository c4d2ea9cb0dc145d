"""Body-size analyzer - recommends a clothing size from a photo."""

import json
import logging
import re

from pydantic import ValidationError

from ..models import SizeAnalysis
from ..services.gateway_client import GatewayClient

logger = logging.getLogger(__name__)


SIZING_SYSTEM_PROMPT = """You are a professional fashion sizing AI assistant. Analyze body proportions from images to recommend clothing sizes (S, M, L, XL).

Your analysis should consider:
- Overall body frame (small, medium, large)
- Shoulder width relative to body
- Torso proportions
- Height indicators from posture

Return your response in this exact JSON format:
{
  "recommendedSize": "M",
  "confidence": 85,
  "bodyType": "athletic",
  "measurements": {
    "chest": "38-40 inches",
    "shoulders": "medium width"
  },
  "fitAdvice": "Size M will provide a comfortable regular fit. Consider L for a looser style."
}"""

SIZING_QUESTION = (
    "Analyze this person's body proportions and recommend the best t-shirt size "
    "(S, M, L, or XL). Provide sizing confidence and fit advice."
)


def parse_size_analysis(text: str) -> SizeAnalysis:
    """Parse the model reply, falling back to a size M recommendation."""
    match = re.search(r"\{[\s\S]*\}", text or "")
    if not match:
        return SizeAnalysis(
            recommended_size="M",
            confidence=75,
            body_type="standard",
            measurements={"chest": "standard proportions", "shoulders": "medium width"},
            fit_advice=(text or "").strip(),
        )

    try:
        data = json.loads(match.group(0))
        if isinstance(data.get("confidence"), float):
            data["confidence"] = round(data["confidence"])
        if isinstance(data.get("measurements"), dict):
            data["measurements"] = {k: str(v) for k, v in data["measurements"].items()}
        return SizeAnalysis.model_validate(data)
    except (json.JSONDecodeError, ValidationError, AttributeError) as e:
        logger.warning(f"Unparseable size analysis: {e}")
        return SizeAnalysis(
            recommended_size="M",
            confidence=70,
            body_type="standard",
            measurements={"chest": "Unable to determine exact measurements", "shoulders": "standard"},
            fit_advice="Size M recommended as a safe starting point.",
        )


class SizeAnalyzer:
    """Asks the gateway's text model for a size recommendation."""

    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway

    async def analyze(self, image_url: str) -> SizeAnalysis:
        """Analyze one photo (data URL or http URL).

        Raises:
            GatewayError: the gateway call failed
        """
        text = await self.gateway.analyze_image(SIZING_SYSTEM_PROMPT, SIZING_QUESTION, image_url)
        return parse_size_analysis(text)
