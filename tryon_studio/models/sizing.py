"""Body-size analysis models."""

from pydantic import BaseModel, ConfigDict, Field


class SizeAnalysis(BaseModel):
    """Size recommendation produced from a full or upper-body photo."""
    model_config = ConfigDict(populate_by_name=True)

    recommended_size: str = Field(default="M", alias="recommendedSize")
    confidence: int = Field(default=70, ge=0, le=100)
    body_type: str = Field(default="standard", alias="bodyType")
    measurements: dict[str, str] = Field(default_factory=dict)
    fit_advice: str = Field(default="", alias="fitAdvice")
