"""Image marshaling helpers for intake previews and OCR input.

All functions are synchronous and CPU bound; async callers offload
them with ``asyncio.to_thread``.
"""

import base64
import io

from PIL import Image, ImageOps

from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)


def make_preview(data: bytes, content_type: str) -> str:
    """Encode an uploaded payload as a data URL for in-browser display.

    Args:
        data: Raw uploaded bytes.
        content_type: Declared media type of the upload.

    Returns:
        A ``data:<type>;base64,...`` string.
    """
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def load_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGB PIL image.

    EXIF orientation is applied so phone photos are not fed sideways.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a decodable image.
    """
    image = Image.open(io.BytesIO(data))
    image = ImageOps.exif_transpose(image)
    return image.convert("RGB")


def resize_to_bound(image: Image.Image, max_dimension: int) -> Image.Image:
    """Downsize an image so neither side exceeds ``max_dimension``.

    Aspect ratio is preserved and images already within the bound are
    returned unchanged (never upscaled).

    Args:
        image: Input image.
        max_dimension: Upper bound for width and height in pixels.

    Returns:
        The resized image, or the input itself if no resize was needed.
    """
    width, height = image.size
    if width <= max_dimension and height <= max_dimension:
        return image

    ratio = min(max_dimension / width, max_dimension / height)
    new_size = (
        min(max_dimension, max(1, round(width * ratio))),
        min(max_dimension, max(1, round(height * ratio))),
    )
    logger.debug("Resizing image from %dx%d to %dx%d", width, height, *new_size)
    return image.resize(new_size, Image.Resampling.LANCZOS)


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """Encode an image as JPEG at the given quality factor (1-95)."""
    buf = io.BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def prepare_for_ocr(data: bytes, max_dimension: int, quality: int) -> Image.Image:
    """Decode, bound, and lossy-encode an upload into model input.

    Args:
        data: Raw uploaded bytes.
        max_dimension: Upper bound for width and height.
        quality: JPEG quality factor.

    Returns:
        The RGB image decoded from the re-encoded JPEG.
    """
    image = resize_to_bound(load_image(data), max_dimension)
    encoded = encode_jpeg(image, quality)
    return Image.open(io.BytesIO(encoded)).convert("RGB")
