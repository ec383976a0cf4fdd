"""
Single-image resize routines.

This module holds the unit of work shared by the sequential and concurrent
batch drivers: compute the scaled size, stretch the source onto a new canvas
and write the result as JPEG.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import (
    DecodeFailureError,
    EncodeFailureError,
    ImageIOFailureError,
    InvalidDimensionsError,
)

logger = logging.getLogger(__name__)

RESAMPLE_FILTER = getattr(Image, "Resampling", Image).LANCZOS
JPEG_QUALITY = 95
OUTPUT_SUFFIX = ".jpg"

# JPEG has no alpha channel; the transparent canvas is flattened onto this.
DEFAULT_BACKGROUND: Tuple[int, int, int] = (255, 255, 255)

NAMING_FLAT = "flat"
NAMING_MIRROR = "mirror"
NAMING_MODES = (NAMING_FLAT, NAMING_MIRROR)

# Integer modes that hold more than 8 bits per sample, e.g. 16-bit greyscale PNG.
HIGH_BIT_DEPTH_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")

Size = Tuple[int, int]
Color = Tuple[int, int, int]


@dataclass(frozen=True)
class ResizeJob:
    """One source image and where its scaled copy goes."""

    source: Path
    destination: Path
    scale: float


@dataclass
class ResizeResult:
    """Outcome of a completed resize job."""

    source: Path
    destination: Path
    source_size: Size
    output_size: Size
    elapsed_s: float


def compute_scaled_size(size: Size, scale: float) -> Size:
    """
    Scale ``(width, height)`` by ``scale``, truncating to whole pixels.

    Raises:
        ValueError: If scale is not a positive finite number or a dimension
            would drop below 1px
    """
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be positive and finite, got {scale}")

    width, height = size
    new_width = int(width * scale)
    new_height = int(height * scale)
    if new_width < 1 or new_height < 1:
        raise ValueError(
            f"Scaled size {new_width}x{new_height} for {width}x{height} "
            f"at scale {scale} is empty"
        )
    return new_width, new_height


def resize_bitmap(
    image: Image.Image,
    src_width: int,
    src_height: int,
    new_width: int,
    new_height: int,
    background: Color = DEFAULT_BACKGROUND,
) -> Image.Image:
    """
    Stretch the full source rectangle onto a ``new_width`` x ``new_height`` canvas.

    The canvas starts fully transparent and is flattened onto ``background``
    so the returned RGB image can be written as JPEG.
    """
    if new_width <= 0 or new_height <= 0:
        raise ValueError("Target dimensions must be positive")

    if image.mode in HIGH_BIT_DEPTH_MODES:
        image = to_eight_bit(image)

    source = image if image.mode == "RGBA" else image.convert("RGBA")
    scaled = source.resize(
        (new_width, new_height),
        RESAMPLE_FILTER,
        box=(0, 0, src_width, src_height),
    )

    canvas = Image.new("RGBA", (new_width, new_height), (0, 0, 0, 0))
    canvas.alpha_composite(scaled)

    flattened = Image.new("RGB", (new_width, new_height), background)
    flattened.paste(canvas, mask=canvas.getchannel("A"))
    return flattened


def to_eight_bit(image: Image.Image) -> Image.Image:
    """Map a 16-bit greyscale image onto 8-bit ``L`` instead of clipping at 255."""
    return image.convert("I").point(lambda value: value * (1 / 256)).convert("L")


def destination_for(
    source: Union[str, Path],
    source_root: Union[str, Path],
    dest_dir: Union[str, Path],
    naming: str = NAMING_FLAT,
) -> Path:
    """
    Derive the output path for ``source``.

    ``flat`` writes ``<stem>.jpg`` straight into ``dest_dir``, so files that
    share a stem in different subdirectories overwrite each other. ``mirror``
    recreates the source subdirectory layout under ``dest_dir``.
    """
    source_path = Path(source)
    filename = source_path.stem + OUTPUT_SUFFIX

    if naming == NAMING_FLAT:
        return Path(dest_dir) / filename
    if naming == NAMING_MIRROR:
        relative_dir = source_path.parent.relative_to(Path(source_root))
        return Path(dest_dir) / relative_dir / filename
    raise ValueError(f"Unsupported naming mode: {naming}")


def resize_file(job: ResizeJob, background: Color = DEFAULT_BACKGROUND) -> ResizeResult:
    """
    Load, resize and save a single image.

    Raises:
        DecodeFailureError: If the source is not a readable image
        ImageIOFailureError: If the source cannot be opened
        InvalidDimensionsError: If the scale shrinks the image below 1px
        EncodeFailureError: If the JPEG cannot be written
    """
    started = time.perf_counter()

    try:
        image = Image.open(job.source)
    except UnidentifiedImageError as exc:
        raise DecodeFailureError(job.source, str(exc)) from exc
    except OSError as exc:
        raise ImageIOFailureError(job.source, str(exc)) from exc

    with image:
        try:
            image.load()
        except (OSError, SyntaxError) as exc:
            raise DecodeFailureError(job.source, str(exc)) from exc

        src_width, src_height = image.size
        try:
            new_width, new_height = compute_scaled_size(image.size, job.scale)
        except ValueError as exc:
            raise InvalidDimensionsError(job.source, str(exc)) from exc
        resized = resize_bitmap(
            image, src_width, src_height, new_width, new_height, background
        )

    try:
        job.destination.parent.mkdir(parents=True, exist_ok=True)
        resized.save(job.destination, format="JPEG", quality=JPEG_QUALITY)
    except OSError as exc:
        raise EncodeFailureError(job.destination, str(exc)) from exc

    elapsed = time.perf_counter() - started
    logger.debug(
        "Resized %s %dx%d -> %dx%d in %.3fs",
        job.source.name,
        src_width,
        src_height,
        new_width,
        new_height,
        elapsed,
    )
    return ResizeResult(
        source=job.source,
        destination=job.destination,
        source_size=(src_width, src_height),
        output_size=(new_width, new_height),
        elapsed_s=elapsed,
    )


__all__ = [
    "DEFAULT_BACKGROUND",
    "JPEG_QUALITY",
    "NAMING_FLAT",
    "NAMING_MIRROR",
    "NAMING_MODES",
    "ResizeJob",
    "ResizeResult",
    "compute_scaled_size",
    "destination_for",
    "resize_bitmap",
    "resize_file",
    "to_eight_bit",
]
