"""Try-on result models."""

import re
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..utils.images import extension_for, to_data_url

_UNSAFE_CHARS = re.compile(r"[^\w.-]+")


class TryOnResult(BaseModel):
    """Composite image returned by the compositing endpoint."""
    model_config = ConfigDict(frozen=True)

    image: bytes = Field(repr=False)
    media_type: str = "image/png"
    completed_at: datetime = Field(default_factory=datetime.now)

    # The inputs this result was generated for
    image_id: str
    product_id: str
    product_name: str = ""

    def to_data_url(self) -> str:
        return to_data_url(self.image, self.media_type)

    def suggested_filename(self) -> str:
        """Download name, e.g. ``tryon_Black_T-Shirt_2024-05-01.png``.

        Anything outside letters, digits, ``-`` and ``.`` becomes ``_`` so the
        name always stays inside the target directory.
        """
        name = "_".join(self.product_name.split()) or self.product_id
        name = _UNSAFE_CHARS.sub("_", name).strip("._") or "product"
        return f"tryon_{name}_{self.completed_at.date().isoformat()}.{extension_for(self.media_type)}"

    def save(self, directory: Path) -> Path:
        """Write the composite image to ``directory``."""
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.suggested_filename()
        path.write_bytes(self.image)
        return path
