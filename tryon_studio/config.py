"""Configuration management for the try-on studio."""

from pathlib import Path
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings


class CameraConfig(BaseModel):
    """Camera stream preferences."""
    facing_mode: str = "user"  # "user" or "environment"
    width: int = 1280
    height: int = 720
    # OpenCV has no notion of facing mode, so each mode maps to a device index
    user_device_index: int = 0
    environment_device_index: int = 1


class CountdownConfig(BaseModel):
    """Capture countdown settings."""
    ticks: int = 3
    interval: float = 1.0  # seconds per tick


class CompositorConfig(BaseModel):
    """Compositing endpoint the studio submits try-on requests to."""
    base_url: str = "http://127.0.0.1:8000"
    endpoint: str = "/functions/virtual-tryon"
    timeout: float = 120.0

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.endpoint}"


class FetchConfig(BaseModel):
    """Remote image fetch settings."""
    timeout: float = 30.0
    max_bytes: int = 10 * 1024 * 1024


class GatewayConfig(BaseModel):
    """OpenAI-compatible AI gateway used by the compositing API."""
    url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    image_model: str = "google/gemini-2.5-flash-image-preview"
    text_model: str = "google/gemini-2.5-flash"
    timeout: float = 180.0


class StudioConfig(BaseSettings):
    """Main studio configuration."""

    # Paths
    output_dir: Path = Path("output/tryons")

    # Sub-configs
    camera: CameraConfig = Field(default_factory=CameraConfig)
    countdown: CountdownConfig = Field(default_factory=CountdownConfig)
    compositor: CompositorConfig = Field(default_factory=CompositorConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)

    # Gateway key (loaded from .env)
    gateway_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gateway_api_key", "LOVABLE_API_KEY"),
    )

    # Compositing API
    allowed_origins: list[str] = Field(default_factory=lambda: [
        "http://localhost:5173",
        "http://localhost:8080",
    ])

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        populate_by_name = True
        extra = "ignore"


def load_config() -> StudioConfig:
    """Load configuration from environment and defaults."""
    return StudioConfig()
