"""Selection state: what the next try-on will be made of."""

import logging
from dataclasses import dataclass

from .models import BackgroundMode, CapturedImage, FitOptions, ProductReference, TryOnResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSnapshot:
    """The inputs active when a request was issued."""
    image: CapturedImage | None
    product: ProductReference | None
    options: FitOptions
    revision: int


class SelectionState:
    """Holds the photo, product, options and the result shown for them.

    Every change to the photo or the product bumps ``revision`` and clears
    the result, so a response issued under an older revision is stale.
    """

    def __init__(self):
        self.image: CapturedImage | None = None
        self.product: ProductReference | None = None
        self.options = FitOptions()
        self.result: TryOnResult | None = None
        self.revision = 0

    def _invalidate(self) -> None:
        self.revision += 1
        self.result = None

    def set_image(self, image: CapturedImage | None) -> None:
        if image is self.image:
            return
        self.image = image
        self._invalidate()

    def select_product(self, product: ProductReference | None) -> None:
        if product == self.product:
            return
        self.product = product
        self._invalidate()
        if product is not None:
            logger.info(f"Selected: {product.name}")

    def set_fit(self, fit: int) -> None:
        self.options = FitOptions(fit=fit, background=self.options.background)

    def set_background(self, background: BackgroundMode | str) -> None:
        self.options = FitOptions(fit=self.options.fit, background=BackgroundMode(background))

    def snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(
            image=self.image,
            product=self.product,
            options=self.options,
            revision=self.revision,
        )

    def is_current(self, snapshot: SelectionSnapshot) -> bool:
        return (
            snapshot.revision == self.revision
            and snapshot.image is self.image
            and snapshot.product == self.product
        )

    def apply_result(self, snapshot: SelectionSnapshot, result: TryOnResult) -> bool:
        """Show ``result`` if its inputs are still the active ones."""
        if not self.is_current(snapshot):
            return False
        self.result = result
        return True

    def clear_result(self) -> None:
        self.result = None
