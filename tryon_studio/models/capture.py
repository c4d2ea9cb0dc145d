"""Captured photo models."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..utils.images import to_data_url


class ImageSource(str, Enum):
    """Where a captured photo came from."""
    CAMERA = "camera"
    FILE_UPLOAD = "file-upload"
    REMOTE_URL = "remote-url"


class CapturedImage(BaseModel):
    """A single still photo of the user, held in memory until submitted.

    Replaced wholesale on re-capture, never mutated.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    media_type: str = "image/jpeg"
    source: ImageSource
    width: int = Field(ge=1)
    height: int = Field(ge=1)

    image_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    captured_at: datetime = Field(default_factory=datetime.now)

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.media_type)
