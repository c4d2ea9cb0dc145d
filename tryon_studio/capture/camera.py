"""Camera device abstractions.

A ``CameraDevice`` hands out at most one ``CameraStream`` at a time; the
stream is an owned handle that must be stopped explicitly. Backends raise
the classified camera errors from ``tryon_studio.errors``.
"""

from abc import ABC, abstractmethod
from enum import Enum

from PIL import Image
from pydantic import BaseModel, ConfigDict


class FacingMode(str, Enum):
    USER = "user"
    ENVIRONMENT = "environment"

    @property
    def opposite(self) -> "FacingMode":
        return FacingMode.ENVIRONMENT if self is FacingMode.USER else FacingMode.USER


class StreamConstraints(BaseModel):
    """Requested stream settings. Backends may silently downgrade resolution."""
    model_config = ConfigDict(frozen=True)

    facing_mode: FacingMode = FacingMode.USER
    width: int | None = 1280
    height: int | None = 720

    def relaxed(self) -> "StreamConstraints":
        """Same facing mode, no resolution preference."""
        return StreamConstraints(facing_mode=self.facing_mode, width=None, height=None)

    def facing(self, mode: FacingMode) -> "StreamConstraints":
        return self.model_copy(update={"facing_mode": mode})


class CameraStream(ABC):
    """A live video stream."""

    @property
    @abstractmethod
    def active(self) -> bool:
        ...

    @property
    @abstractmethod
    def facing_mode(self) -> FacingMode:
        ...

    @abstractmethod
    def read_frame(self) -> Image.Image | None:
        """Return the current decoded frame, or None if none is ready."""

    @abstractmethod
    def stop(self) -> None:
        """Release the underlying device. Idempotent."""


class CameraDevice(ABC):
    """Grants camera streams."""

    @abstractmethod
    async def open(self, constraints: StreamConstraints) -> CameraStream:
        """Open a stream.

        Raises:
            PermissionDenied: access refused
            NoDevice: no camera for the requested facing mode
            UnsupportedConstraints: the device can't satisfy the constraints
        """


def frame_ready(frame: Image.Image | None) -> bool:
    return frame is not None and frame.width > 0 and frame.height > 0
