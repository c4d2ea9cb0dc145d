"""Photo acquisition state machine.

States::

    IDLE --start()--> LIVE --capture()--> COUNTDOWN --(zero)--> CAPTURED
      ^                |  ^                   |                    |
      +----stop()------+  +--FrameNotReady----+                    |
      +----stop()-----------------------------+                    |
      +----reset() or stop()---------------------------------------+

``load_external()`` goes straight to CAPTURED from any state. IDLE and
CAPTURED are the only rest states; the camera stream exists only in LIVE
and COUNTDOWN.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable

from ..config import CameraConfig, CountdownConfig
from ..errors import FrameNotReady, InvalidTransition, UnsupportedConstraints
from ..models import CapturedImage, ImageSource
from ..services.image_fetcher import ImageFetcher
from ..utils.images import encode_jpeg, inspect_image
from .camera import CameraDevice, CameraStream, FacingMode, StreamConstraints, frame_ready
from .countdown import Countdown

logger = logging.getLogger(__name__)


class AcquisitionState(str, Enum):
    IDLE = "idle"
    LIVE = "live"
    COUNTDOWN = "countdown"
    CAPTURED = "captured"


class AcquisitionController:
    """Owns the camera stream, the capture countdown and the captured photo."""

    def __init__(
        self,
        camera: CameraDevice,
        fetcher: ImageFetcher | None = None,
        camera_config: CameraConfig | None = None,
        countdown_config: CountdownConfig | None = None,
        on_image_changed: Callable[[CapturedImage | None], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
    ):
        camera_config = camera_config or CameraConfig()
        self.camera = camera
        self.fetcher = fetcher
        self.countdown_config = countdown_config or CountdownConfig()
        self.on_image_changed = on_image_changed
        self.on_tick = on_tick

        self.state = AcquisitionState.IDLE
        self.image: CapturedImage | None = None

        self._constraints = StreamConstraints(
            facing_mode=FacingMode(camera_config.facing_mode),
            width=camera_config.width,
            height=camera_config.height,
        )
        self._stream: CameraStream | None = None
        self._countdown: Countdown | None = None
        self._opening = False
        # Bumped by stop(); a camera grant that resolves under an older epoch is released
        self._epoch = 0

    @property
    def stream(self) -> CameraStream | None:
        return self._stream

    @property
    def facing_mode(self) -> FacingMode:
        return self._constraints.facing_mode

    @property
    def countdown_remaining(self) -> int | None:
        return self._countdown.remaining if self._countdown else None

    def _require(self, action: str, *states: AcquisitionState) -> None:
        if self.state not in states or self._opening:
            raise InvalidTransition(f"cannot {action} while {self.state.value}")

    async def _open(self, constraints: StreamConstraints) -> CameraStream:
        """Open a stream, retrying once with relaxed constraints."""
        try:
            return await self.camera.open(constraints)
        except UnsupportedConstraints:
            relaxed = constraints.relaxed()
            if relaxed == constraints:
                raise
            logger.info(
                f"Camera rejected {constraints.width}x{constraints.height}, retrying without a resolution"
            )
            return await self.camera.open(relaxed)

    async def _acquire(self, constraints: StreamConstraints) -> bool:
        """Acquire a stream into ``self._stream``. False if stop() won the race."""
        epoch = self._epoch
        self._opening = True
        try:
            stream = await self._open(constraints)
        finally:
            self._opening = False

        if epoch != self._epoch:
            logger.info("Camera granted after stop, releasing it")
            stream.stop()
            return False

        self._stream = stream
        self._constraints = constraints
        return True

    def _release_stream(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _halt(self) -> None:
        """Cancel any countdown and release the camera."""
        self._epoch += 1
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        self._release_stream()

    def _set_image(self, image: CapturedImage | None) -> None:
        self.image = image
        if self.on_image_changed is not None:
            self.on_image_changed(image)

    async def start(self) -> None:
        """Request the camera and go live."""
        self._require("start the camera", AcquisitionState.IDLE)
        if await self._acquire(self._constraints):
            self.state = AcquisitionState.LIVE
            logger.info(f"Camera live ({self.facing_mode.value})")

    async def flip(self) -> None:
        """Swap to the opposite facing mode.

        The current stream is fully released before the new one is requested.
        If the new stream can't be opened the controller ends up IDLE.
        """
        self._require("flip the camera", AcquisitionState.LIVE)
        target = self._constraints.facing(self.facing_mode.opposite)
        self._release_stream()
        try:
            acquired = await self._acquire(target)
        except Exception:
            self.state = AcquisitionState.IDLE
            raise
        if acquired:
            logger.info(f"Camera flipped to {target.facing_mode.value}")

    async def capture(self, on_tick: Callable[[int], None] | None = None) -> CapturedImage | None:
        """Count down and snapshot the live frame.

        Returns:
            The captured photo, or None if stop() cancelled the countdown.

        Raises:
            FrameNotReady: no decoded frame before or at the end of the countdown
        """
        self._require("capture", AcquisitionState.LIVE)
        if self._stream is None or not frame_ready(self._stream.read_frame()):
            raise FrameNotReady("no video frame yet")

        countdown = Countdown(
            ticks=self.countdown_config.ticks,
            interval=self.countdown_config.interval,
            on_tick=on_tick or self.on_tick,
        )
        self._countdown = countdown
        self.state = AcquisitionState.COUNTDOWN
        try:
            completed = await countdown.run()
        except BaseException:
            if self._countdown is countdown:
                self._countdown = None
                self.state = AcquisitionState.LIVE
            raise

        if not completed:
            logger.info("Capture cancelled during countdown")
            return None
        self._countdown = None

        frame = self._stream.read_frame() if self._stream is not None else None
        if not frame_ready(frame):
            self.state = AcquisitionState.LIVE
            raise FrameNotReady("frame lost during countdown")

        image = CapturedImage(
            data=encode_jpeg(frame, quality=90),
            media_type="image/jpeg",
            source=ImageSource.CAMERA,
            width=frame.width,
            height=frame.height,
        )
        self._release_stream()
        self.state = AcquisitionState.CAPTURED
        self._set_image(image)
        logger.info(f"Captured {image.width}x{image.height} photo")
        return image

    def stop(self) -> None:
        """Cancel any countdown, release the camera and return to IDLE.

        From CAPTURED the photo is discarded, like reset(). No-op in IDLE.
        """
        self._halt()
        if self.state is AcquisitionState.CAPTURED:
            self.state = AcquisitionState.IDLE
            self._set_image(None)
            logger.info("Captured photo discarded")
        elif self.state in (AcquisitionState.LIVE, AcquisitionState.COUNTDOWN):
            self.state = AcquisitionState.IDLE
            logger.info("Camera stopped")

    async def load_external(self, source: bytes | str | Path) -> CapturedImage:
        """Use an uploaded file or a remote image instead of the camera.

        Failures leave the controller untouched.

        Raises:
            NotAnImage: payload (or its declared media type) isn't an image
            InvalidUrl: malformed URL
            NetworkBlocked: the URL couldn't be fetched
        """
        if isinstance(source, Path):
            source = source.read_bytes()

        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
            media_type, width, height = inspect_image(data)
            origin = ImageSource.FILE_UPLOAD
        elif isinstance(source, str):
            if self.fetcher is None:
                self.fetcher = ImageFetcher()
            data, media_type = await self.fetcher.fetch(source)
            _, width, height = inspect_image(data)
            origin = ImageSource.REMOTE_URL
        else:
            raise TypeError(f"expected bytes, str or Path, got {type(source).__name__}")

        image = CapturedImage(
            data=data,
            media_type=media_type,
            source=origin,
            width=width,
            height=height,
        )
        self._halt()
        self.state = AcquisitionState.CAPTURED
        self._set_image(image)
        logger.info(f"Loaded {width}x{height} photo from {origin.value}")
        return image

    def reset(self) -> None:
        """Discard the captured photo."""
        self._require("reset", AcquisitionState.CAPTURED)
        self.state = AcquisitionState.IDLE
        self._set_image(None)

    def close(self) -> None:
        """Teardown: always releases the camera."""
        self.stop()
