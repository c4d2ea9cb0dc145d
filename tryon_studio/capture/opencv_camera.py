"""OpenCV-backed camera device."""

import asyncio
import logging

import cv2
from PIL import Image

from ..config import CameraConfig
from ..errors import NoDevice, UnsupportedConstraints
from .camera import CameraDevice, CameraStream, FacingMode, StreamConstraints

logger = logging.getLogger(__name__)


class OpenCVStream(CameraStream):
    """Stream wrapping a ``cv2.VideoCapture``."""

    def __init__(self, capture: "cv2.VideoCapture", facing_mode: FacingMode):
        self._capture = capture
        self._facing_mode = facing_mode

    @property
    def active(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    @property
    def facing_mode(self) -> FacingMode:
        return self._facing_mode

    def read_frame(self) -> Image.Image | None:
        if not self.active:
            return None
        ok, frame = self._capture.read()
        if not ok or frame is None or frame.size == 0:
            return None
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    def stop(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None


class OpenCVCamera(CameraDevice):
    """Local webcams via OpenCV.

    OpenCV has no facing modes, so ``CameraConfig`` maps each mode to a
    device index.
    """

    def __init__(self, config: CameraConfig):
        self.config = config

    def _device_index(self, mode: FacingMode) -> int:
        if mode is FacingMode.ENVIRONMENT:
            return self.config.environment_device_index
        return self.config.user_device_index

    def _open_sync(self, constraints: StreamConstraints) -> OpenCVStream:
        index = self._device_index(constraints.facing_mode)
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            raise NoDevice(f"unable to open camera index {index}")

        if constraints.width and constraints.height:
            accepted = (
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
                and capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
            )
            if not accepted:
                capture.release()
                raise UnsupportedConstraints(
                    f"camera {index} rejected {constraints.width}x{constraints.height}"
                )

        actual_width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera {index} opened at {actual_width}x{actual_height}")
        return OpenCVStream(capture, constraints.facing_mode)

    async def open(self, constraints: StreamConstraints) -> CameraStream:
        return await asyncio.to_thread(self._open_sync, constraints)
