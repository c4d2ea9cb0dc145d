"""Try-on submission: one request per user action, at most one in flight."""

import logging
from pathlib import Path
from typing import Callable

from .errors import AlreadyPending, MissingInput, NoPersonDetected
from .models import CapturedImage, FitOptions, ProductReference, TryOnResult
from .selection import SelectionSnapshot, SelectionState
from .services.compositor_client import CompositorClient
from .services.image_fetcher import ImageFetcher
from .utils.images import inspect_image, to_data_url

logger = logging.getLogger(__name__)


class SubmissionController:
    """Sends the photo and product to the compositing endpoint.

    Single-flight: ``submit()`` while a request is pending raises
    ``AlreadyPending``; nothing is queued or cancelled. A response is only
    applied to the selection if its photo and product are still the active
    ones, otherwise it is dropped. Failures are never retried here.
    """

    def __init__(
        self,
        client: CompositorClient,
        selection: SelectionState,
        fetcher: ImageFetcher | None = None,
        on_image_rejected: Callable[[CapturedImage], None] | None = None,
    ):
        self.client = client
        self.selection = selection
        self.fetcher = fetcher or ImageFetcher()
        self.on_image_rejected = on_image_rejected
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    async def submit(
        self,
        image: CapturedImage | None,
        product: ProductReference | None,
        options: FitOptions | None = None,
    ) -> TryOnResult | None:
        """Generate a try-on for ``image`` wearing ``product``.

        Returns:
            The result, or None if the selection changed while it was generated.

        Raises:
            AlreadyPending, MissingInput, Throttled, QuotaExceeded,
            GenerationFailed, EmptyResult, NoPersonDetected, and the fetch
            errors for a remote product image.
        """
        if self._pending:
            raise AlreadyPending()
        if image is None or product is None:
            raise MissingInput()

        options = options or FitOptions()
        snapshot = SelectionSnapshot(
            image=image,
            product=product,
            options=options,
            revision=self.selection.revision,
        )

        self._pending = True
        logger.info(f"Submitting try-on for {product.name} (background={options.background.value})")
        try:
            product_image = await self._encode_product_image(product)
            data, media_type = await self.client.composite(
                user_image=image.to_data_url(),
                product_image=product_image,
                product_name=product.name,
                background_mode=options.background,
                fit_preference=options.band,
            )
        except NoPersonDetected:
            self._reject_image(image)
            raise
        finally:
            self._pending = False

        result = TryOnResult(
            image=data,
            media_type=media_type,
            image_id=image.image_id,
            product_id=product.id,
            product_name=product.name,
        )
        if not self.selection.apply_result(snapshot, result):
            logger.info(f"Discarding stale try-on result for {product.name}")
            return None

        logger.info(f"Try-on complete for {product.name}")
        return result

    def _reject_image(self, image: CapturedImage) -> None:
        """The same photo would fail again, so force a new acquisition."""
        logger.info("No person detected, discarding photo")
        if self.selection.image is image:
            self.selection.set_image(None)
        if self.on_image_rejected is not None:
            self.on_image_rejected(image)

    async def _encode_product_image(self, product: ProductReference) -> str:
        """Return the product image as a data URL, like the user photo."""
        ref = product.image
        if ref.startswith("data:"):
            return ref
        if ref.startswith(("http://", "https://")):
            data, media_type = await self.fetcher.fetch(ref)
            return to_data_url(data, media_type)

        path = Path(ref)
        if not path.is_file():
            raise MissingInput(f"product image not found: {ref}")
        data = path.read_bytes()
        media_type, _, _ = inspect_image(data)
        return to_data_url(data, media_type)
