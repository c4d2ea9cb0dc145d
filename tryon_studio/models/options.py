"""Fit and background options."""

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class BackgroundMode(str, Enum):
    ORIGINAL = "original"
    PLAIN = "plain"
    TRANSPARENT = "transparent"
    STUDIO = "studio"


class FitBand(str, Enum):
    SLIM = "Slim"
    REGULAR = "Regular"
    RELAXED = "Relaxed"
    OVERSIZED = "Oversized"


def fit_band(value: int) -> FitBand:
    """Map a 0-100 fit tightness value to its labeled band."""
    if value <= 25:
        return FitBand.SLIM
    if value <= 50:
        return FitBand.REGULAR
    if value <= 75:
        return FitBand.RELAXED
    return FitBand.OVERSIZED


class FitOptions(BaseModel):
    """Fit tightness and background preferences for a try-on."""

    fit: int = Field(default=50, ge=0, le=100)
    background: BackgroundMode = BackgroundMode.ORIGINAL

    @computed_field
    @property
    def band(self) -> FitBand:
        return fit_band(self.fit)
