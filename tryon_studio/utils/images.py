"""Image encoding helpers shared by acquisition, submission and the API."""

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..errors import NotAnImage


def sniff_media_type(data: bytes) -> str | None:
    """Detect image format from magic bytes."""
    if data[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if data[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if data[:4] == b'RIFF' and data[8:12] == b'WEBP':
        return "image/webp"
    if data[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"
    if data[:2] == b'BM':
        return "image/bmp"
    return None


def inspect_image(data: bytes) -> tuple[str, int, int]:
    """Validate that ``data`` is a decodable image.

    Returns:
        (media_type, width, height)

    Raises:
        NotAnImage: if Pillow can't identify the payload
    """
    if not data:
        raise NotAnImage("empty payload")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            fmt = img.format
            width, height = img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise NotAnImage(str(e)) from e

    media_type = sniff_media_type(data) or Image.MIME.get(fmt or "", "application/octet-stream")
    if width <= 0 or height <= 0:
        raise NotAnImage("image has no pixels")
    return media_type, width, height


def encode_jpeg(image: Image.Image, quality: int = 90) -> bytes:
    """Encode a still frame as JPEG."""
    if image.mode != "RGB":
        image = image.convert("RGB")
    output = io.BytesIO()
    image.save(output, format="JPEG", quality=quality)
    return output.getvalue()


def to_data_url(data: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data: str) -> tuple[bytes, str | None]:
    """Decode a base64 data URL (or bare base64) into bytes and its media type.

    Whitespace is ignored; any other character outside the base64 alphabet
    is rejected rather than silently dropped.
    """
    media_type = None
    encoded = data
    if data.startswith("data:"):
        # e.g. "data:image/png;base64,...."
        header, _, encoded = data.partition(",")
        media_type = header[5:].split(";", 1)[0] or None
    try:
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise NotAnImage(f"invalid base64 payload: {e}") from e
    return raw, media_type


def extension_for(media_type: str) -> str:
    return {
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
        "image/bmp": "bmp",
    }.get(media_type, "png")
