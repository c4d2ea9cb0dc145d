"""Try-on session: acquisition, selection and submission wired together."""

import logging
from pathlib import Path
from typing import Callable

from .capture import AcquisitionController, AcquisitionState, CameraDevice
from .config import StudioConfig
from .errors import QuotaExceeded
from .models import BackgroundMode, CapturedImage, ProductReference, TryOnResult
from .selection import SelectionState
from .services import CompositorClient, ImageFetcher
from .submission import SubmissionController

logger = logging.getLogger(__name__)


class TryOnStudio:
    """One user's try-on session.

    Use as an async context manager so the camera and HTTP clients are
    always released::

        async with TryOnStudio(config, camera) as studio:
            await studio.start_camera()
            await studio.capture()
            studio.select_product(product)
            result = await studio.try_on()
    """

    def __init__(
        self,
        config: StudioConfig,
        camera: CameraDevice,
        compositor: CompositorClient | None = None,
        fetcher: ImageFetcher | None = None,
        on_tick: Callable[[int], None] | None = None,
    ):
        self.config = config
        self.fetcher = fetcher or ImageFetcher(config.fetch)
        self.compositor = compositor or CompositorClient(config.compositor)

        self.selection = SelectionState()
        self.acquisition = AcquisitionController(
            camera=camera,
            fetcher=self.fetcher,
            camera_config=config.camera,
            countdown_config=config.countdown,
            on_image_changed=self.selection.set_image,
            on_tick=on_tick,
        )
        self.submission = SubmissionController(
            client=self.compositor,
            selection=self.selection,
            fetcher=self.fetcher,
            on_image_rejected=self._on_image_rejected,
        )
        self._quota_exceeded: QuotaExceeded | None = None

    async def __aenter__(self) -> "TryOnStudio":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Acquisition

    @property
    def state(self) -> AcquisitionState:
        return self.acquisition.state

    @property
    def image(self) -> CapturedImage | None:
        return self.selection.image

    async def start_camera(self) -> None:
        await self.acquisition.start()

    async def flip_camera(self) -> None:
        await self.acquisition.flip()

    async def capture(self) -> CapturedImage | None:
        return await self.acquisition.capture()

    def stop_camera(self) -> None:
        self.acquisition.stop()

    async def load_photo(self, source: bytes | str | Path) -> CapturedImage:
        return await self.acquisition.load_external(source)

    def change_photo(self) -> None:
        """Discard the current photo and go back to acquisition."""
        self.acquisition.reset()

    def _on_image_rejected(self, image: CapturedImage) -> None:
        if self.acquisition.image is image and self.acquisition.state is AcquisitionState.CAPTURED:
            self.acquisition.reset()

    # Selection

    def select_product(self, product: ProductReference | None) -> None:
        self.selection.select_product(product)

    def set_fit(self, fit: int) -> None:
        self.selection.set_fit(fit)

    def set_background(self, background: BackgroundMode | str) -> None:
        self.selection.set_background(background)

    @property
    def result(self) -> TryOnResult | None:
        return self.selection.result

    # Submission

    @property
    def processing(self) -> bool:
        return self.submission.pending

    @property
    def can_submit(self) -> bool:
        return (
            not self.submission.pending
            and self._quota_exceeded is None
            and self.selection.image is not None
            and self.selection.product is not None
        )

    async def try_on(self) -> TryOnResult | None:
        """Submit the current selection.

        Returns None if the photo or product changed before the result arrived.
        """
        if self._quota_exceeded is not None:
            raise QuotaExceeded("credits exhausted earlier in this session")
        try:
            return await self.submission.submit(
                self.selection.image,
                self.selection.product,
                self.selection.options,
            )
        except QuotaExceeded as e:
            self._quota_exceeded = e
            raise

    def save_result(self, directory: Path | None = None) -> Path | None:
        if self.result is None:
            return None
        return self.result.save(directory or self.config.output_dir)

    async def close(self) -> None:
        self.acquisition.close()
        await self.compositor.close()
        await self.fetcher.close()
