from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Callable, Tuple

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..config import PHOTO_JPEG_QUALITY, PHOTO_MAX_WIDTH_PX
from ..errors import ImageDecodeError
from .entries import PhotoRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedPhoto:
    data: bytes
    width: int
    height: int


PhotoLoader = Callable[[PhotoRecord], PreparedPhoto]


def scale_to_fit(natural_w: float, natural_h: float, max_w: float, max_h: float) -> Tuple[float, float]:
    """
    Uniform scale that fits ``natural_w x natural_h`` inside ``max_w x max_h``.
    The result keeps the aspect ratio and may scale up.
    """
    if natural_w <= 0 or natural_h <= 0:
        raise ValueError(f"Invalid image size: {natural_w}x{natural_h}")
    ratio = min(max_w / natural_w, max_h / natural_h)
    return natural_w * ratio, natural_h * ratio


def prepare_photo(photo: PhotoRecord, max_width: int = PHOTO_MAX_WIDTH_PX) -> PreparedPhoto:
    """
    Decode a stored photo, downscale it to at most ``max_width`` pixels wide and
    re-encode it as JPEG for embedding.
    """
    try:
        with PILImage.open(io.BytesIO(photo.data)) as img:
            img.load()
            scale = min(1.0, max_width / float(img.width))
            w = max(1, round(img.width * scale))
            h = max(1, round(img.height * scale))
            with img.convert("RGB") as rgb:
                out = io.BytesIO()
                if (w, h) != rgb.size:
                    with rgb.resize((w, h), PILImage.Resampling.LANCZOS) as resized:
                        resized.save(out, format="JPEG", quality=PHOTO_JPEG_QUALITY)
                else:
                    rgb.save(out, format="JPEG", quality=PHOTO_JPEG_QUALITY)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Could not decode photo ({photo.mime_type}): {exc}") from exc

    logger.debug("Prepared photo %sx%s (%d bytes)", w, h, out.getbuffer().nbytes)
    return PreparedPhoto(data=out.getvalue(), width=w, height=h)
