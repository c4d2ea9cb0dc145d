"""Run one try-on from the command line.

Usage:
    python -m tryon_studio --product-image shirt.jpg --product-name "Black T-Shirt"
    python -m tryon_studio --photo me.jpg --product-image https://example.com/dress.jpg
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .capture.opencv_camera import OpenCVCamera
from .config import load_config
from .errors import TryOnError
from .models import BackgroundMode, ProductReference
from .studio import TryOnStudio
from .utils.logger import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tryon-studio", description="Virtual try-on from webcam or photo")
    parser.add_argument("--photo", help="Photo path or URL to use instead of the camera")
    parser.add_argument("--product-image", required=True, help="Product image path or URL")
    parser.add_argument("--product-name", default="", help="Product name, e.g. 'Denim Jacket'")
    parser.add_argument(
        "--background",
        choices=[m.value for m in BackgroundMode],
        default=BackgroundMode.ORIGINAL.value,
    )
    parser.add_argument("--fit", type=int, default=50, help="Fit tightness 0-100")
    parser.add_argument("--flip", action="store_true", help="Use the rear camera")
    parser.add_argument("--output", type=Path, help="Directory for the result image")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    config = load_config()
    configure_logging(config.log_level)

    def on_tick(remaining: int) -> None:
        print(f"   {remaining}...")

    async with TryOnStudio(config, OpenCVCamera(config.camera), on_tick=on_tick) as studio:
        try:
            if args.photo:
                source = args.photo if args.photo.startswith(("http://", "https://")) else Path(args.photo)
                await studio.load_photo(source)
                print("✅ Photo loaded")
            else:
                await studio.start_camera()
                if args.flip:
                    await studio.flip_camera()
                print("📸 Camera ready, capturing in...")
                if await studio.capture() is None:
                    print("Capture cancelled")
                    return 1
                print("✅ Photo captured")

            product_image = args.product_image
            if not product_image.startswith(("http://", "https://", "data:")):
                product_image = str(Path(product_image).resolve())
            studio.select_product(ProductReference(
                id=args.product_name or Path(args.product_image).stem,
                name=args.product_name or Path(args.product_image).stem,
                image=product_image,
            ))
            studio.set_background(args.background)
            studio.set_fit(max(0, min(100, args.fit)))

            print("🎨 Creating your virtual try-on (this may take 10-30 seconds)...")
            result = await studio.try_on()
            if result is None:
                print("Result discarded")
                return 1

            path = studio.save_result(args.output)
            print(f"✨ Saved: {path}")
            return 0
        except TryOnError as e:
            print(f"❌ {e.message}", file=sys.stderr)
            return 2


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
