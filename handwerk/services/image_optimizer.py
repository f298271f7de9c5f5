"""Resize and recompress uploaded images before they reach storage."""
from __future__ import annotations

import io
import logging
import math
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, fields
from typing import Any, Iterable, List, Mapping, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from handwerk.errors import DecodeError, EncodeError, ValidationError

logger = logging.getLogger(__name__)

FORMATS = ("jpeg", "png", "webp")


@dataclass(slots=True)
class ImageFile:
    """An uploaded file as received: name, raw bytes and declared type."""

    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(slots=True)
class OptimizeOptions:
    max_width: int = 1920
    max_height: int = 1920
    quality: float = 0.8
    format: str = "jpeg"

    def __post_init__(self) -> None:
        if self.format not in FORMATS:
            raise ValidationError(f"Unsupported image format: {self.format}")
        if not 0 < self.quality <= 1:
            raise ValidationError("Quality must be in (0, 1]")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]] = None) -> "OptimizeOptions":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (values or {}).items() if k in known and v is not None})


@dataclass(slots=True)
class OptimizedImage:
    file: ImageFile
    original_size: int
    width: int
    height: int

    @property
    def optimized_size(self) -> int:
        return self.file.size

    @property
    def compression_ratio(self) -> float:
        # negative when re-encoding grew the file
        return (self.original_size - self.optimized_size) / self.original_size * 100


def is_image_file(file: ImageFile) -> bool:
    return (file.content_type or "").startswith("image/")


def validate_image_file(file: ImageFile, max_size_mb: float = 10) -> None:
    """Reject non-images and files whose original size exceeds ``max_size_mb``."""
    if not is_image_file(file):
        raise ValidationError("File must be an image")
    if file.size > max_size_mb * 1024 * 1024:
        raise ValidationError(f"File size must be less than {max_size_mb:g}MB")


def format_file_size(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(num_bytes) / math.log(1024))), len(units) - 1)
    value = round(num_bytes / 1024 ** i, 2)
    return f"{value:g} {units[i]}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_size(width: int, height: int, max_width: int, max_height: int) -> tuple[float, float]:
    """Scale by the bound of the longer side only; the other axis is not re-clamped."""
    if width > max_width or height > max_height:
        aspect = width / height
        if width > height:
            width = min(width, max_width)
            height = width / aspect
        else:
            height = min(height, max_height)
            width = height * aspect
    return width, height


def _encode(image: Image.Image, fmt: str, quality: float) -> bytes:
    buf = io.BytesIO()
    if fmt == "jpeg":
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (0, 0, 0))
            background.paste(rgba, mask=rgba.split()[-1])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")
        image.save(buf, format="JPEG", quality=max(1, min(100, _round_half_up(quality * 100))))
    elif fmt == "webp":
        image.save(buf, format="WEBP", quality=max(1, min(100, _round_half_up(quality * 100))))
    else:
        image.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def optimize(file: ImageFile, options: Optional[OptimizeOptions] = None) -> OptimizedImage:
    options = options or OptimizeOptions()
    if not is_image_file(file):
        raise ValidationError("File must be an image")

    try:
        source = Image.open(io.BytesIO(file.content))
        source.load()
        source = ImageOps.exif_transpose(source)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError("Failed to load image") from exc

    width, height = target_size(source.width, source.height, options.max_width, options.max_height)
    size = (_round_half_up(width), _round_half_up(height))
    if size[0] < 1 or size[1] < 1:
        raise EncodeError("Failed to create optimized image")

    try:
        rendered = source if size == source.size else source.resize(size, Image.Resampling.LANCZOS)
        content = _encode(rendered, options.format, options.quality)
    except (OSError, ValueError) as exc:
        raise EncodeError("Failed to create optimized image") from exc

    out = ImageFile(filename=file.filename, content=content, content_type=f"image/{options.format}")
    return OptimizedImage(file=out, original_size=file.size, width=size[0], height=size[1])


def optimize_many(
    files: Iterable[ImageFile],
    options: Optional[OptimizeOptions] = None,
    executor: Optional[Executor] = None,
) -> List[OptimizedImage]:
    """Optimize files in parallel. Any failure fails the whole batch."""
    files = list(files)
    if not files:
        return []
    if executor is None:
        with ThreadPoolExecutor(max_workers=min(4, len(files))) as pool:
            results = list(pool.map(lambda f: optimize(f, options), files))
    else:
        results = list(executor.map(lambda f: optimize(f, options), files))

    total_before = sum(r.original_size for r in results)
    total_after = sum(r.optimized_size for r in results)
    savings = (total_before - total_after) / total_before * 100 if total_before else 0.0
    logger.info(
        "Optimized %d images: %s → %s (%.1f%% reduction)",
        len(results), format_file_size(total_before), format_file_size(total_after), savings,
    )
    return results
