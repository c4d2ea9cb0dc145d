"""FastAPI compositing service for Virtual Try-On.

Receives requests from the try-on studio with:
- userImage: Base64 data URL of the user's photo
- productImage: Base64 data URL of the product photo
- productName: Optional product name
- backgroundMode: original, plain, transparent or studio
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from tryon_studio.agents import SizeAnalyzer, TryOnPromptBuilder, mentions_no_person
from tryon_studio.config import StudioConfig, load_config
from tryon_studio.models import BackgroundMode, FitBand
from tryon_studio.services import GatewayClient, GatewayError
from tryon_studio.utils.logger import configure_logging

MAX_IMAGE_CHARS = 1_000_000
MAX_NAME_CHARS = 200

logger = logging.getLogger(__name__)

# Initialized on first use
_config: StudioConfig | None = None
_gateway: GatewayClient | None = None


def get_config() -> StudioConfig:
    """Get or load the service configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_gateway() -> GatewayClient:
    """Get or create the gateway client."""
    global _gateway
    if _gateway is None:
        config = get_config()
        _gateway = GatewayClient(config.gateway, config.gateway_api_key)
    return _gateway


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _gateway
    configure_logging(get_config().log_level)
    yield
    if _gateway is not None:
        await _gateway.close()
        _gateway = None


class ConfiguredCORSMiddleware:
    """CORSMiddleware whose allowed origins are read from config on first use."""

    def __init__(self, app):
        self.app = app
        self._cors: CORSMiddleware | None = None

    async def __call__(self, scope, receive, send):
        if self._cors is None:
            self._cors = CORSMiddleware(
                self.app,
                allow_origins=get_config().allowed_origins,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
            )
        await self._cors(scope, receive, send)


app = FastAPI(
    title="Try-On Studio API",
    description="Virtual try-on compositing through a hosted image model",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(ConfiguredCORSMiddleware)


class TryOnRequest(BaseModel):
    """Request body for try-on generation. Accepts the legacy clothing* names."""
    model_config = ConfigDict(populate_by_name=True)

    user_image: str = Field(validation_alias=AliasChoices("userImage", "user_image"))
    product_image: str = Field(
        validation_alias=AliasChoices("productImage", "clothingImage", "product_image")
    )
    product_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("productName", "clothingName", "product_name"),
    )
    background_mode: BackgroundMode = Field(
        default=BackgroundMode.ORIGINAL,
        validation_alias=AliasChoices("backgroundMode", "backgroundType", "background_mode"),
    )
    fit_preference: FitBand | None = Field(
        default=None,
        validation_alias=AliasChoices("fitPreference", "fit_preference"),
    )


class TryOnResponse(BaseModel):
    """Response with generated image."""
    success: bool
    image: str | None = None
    message: str | None = None


class SizeRequest(BaseModel):
    image: str


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _gateway_error(e: GatewayError, fallback: str) -> JSONResponse:
    if e.status_code == 429:
        return _error(429, "Service is currently busy. Please try again shortly.")
    if e.status_code == 402:
        return _error(402, "Service temporarily unavailable. Please try again later.")
    return _error(500, fallback)


def _valid_image(value: str) -> bool:
    return bool(value) and len(value) <= MAX_IMAGE_CHARS


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Try-On Studio API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    configured = get_gateway().configured
    return {
        "status": "ok" if configured else "degraded",
        "gateway": "configured" if configured else "missing api key",
    }


@app.post("/functions/virtual-tryon", response_model=TryOnResponse)
async def virtual_tryon(request: TryOnRequest):
    """Generate a virtual try-on image.

    Returns the composite as a data URL, or ``{"error": ...}`` with
    ``requiresNewImage`` set when the photo has no person in it.
    """
    if not _valid_image(request.user_image):
        return _error(400, "Invalid user image data")
    if not _valid_image(request.product_image):
        return _error(400, "Invalid product image data")
    if request.product_name and len(request.product_name) > MAX_NAME_CHARS:
        return _error(400, "Invalid product name")

    gateway = get_gateway()
    if not gateway.configured:
        logger.error("Gateway API key is not configured")
        return _error(500, "Service configuration error")

    prompt = TryOnPromptBuilder().build(
        request.product_name,
        background=request.background_mode,
        fit=request.fit_preference,
    )

    try:
        reply = await gateway.generate_image(prompt, [request.user_image, request.product_image])
    except GatewayError as e:
        logger.warning(f"Try-on generation failed: {e}")
        return _gateway_error(e, "Image generation failed. Please try again.")
    except Exception:
        logger.exception("Unexpected try-on failure")
        return _error(500, "An unexpected error occurred. Please try again.")

    if reply.image:
        return TryOnResponse(
            success=True,
            image=reply.image,
            message="Virtual try-on completed successfully",
        )

    if mentions_no_person(reply.text):
        return _error(
            422,
            "No person detected in the photo. Please use a different photo.",
            requiresNewImage=True,
        )

    logger.warning("Gateway reply contained no image")
    return _error(500, "Image generation failed. Please try again.")


@app.post("/functions/analyze-body-size")
async def analyze_body_size(request: SizeRequest):
    """Recommend a t-shirt size from a photo."""
    if not _valid_image(request.image):
        return _error(400, "Invalid image data provided")

    gateway = get_gateway()
    if not gateway.configured:
        logger.error("Gateway API key is not configured")
        return _error(500, "Service configuration error")

    try:
        analysis = await SizeAnalyzer(gateway).analyze(request.image)
    except GatewayError as e:
        logger.warning(f"Size analysis failed: {e}")
        return _gateway_error(e, "Analysis failed. Please try again.")
    except Exception:
        logger.exception("Unexpected size analysis failure")
        return _error(500, "An unexpected error occurred. Please try again.")

    return analysis.model_dump(by_alias=True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
