"""Product reference models."""

from pydantic import BaseModel, ConfigDict, Field


class ProductReference(BaseModel):
    """The garment or accessory chosen for a try-on.

    ``image`` may be an http(s) URL, a local file path or a ``data:`` URL.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(max_length=200)
    image: str
    brand: str = ""
    price: float = Field(default=0.0, ge=0.0, description="Display only")
    category: str | None = Field(default=None, description="e.g. 'clothing', 'accessories'")
