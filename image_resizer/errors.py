"""Exception hierarchy shared by the discovery, resize and batch modules."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from .processing import ResizeResult

PathLike = Union[str, Path]


class ImageResizerError(Exception):
    """Base class for every failure raised by the resizer."""


class SourceNotFoundError(ImageResizerError, FileNotFoundError):
    """Raised when the source directory does not exist."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Source directory not found: {self.path}")


class _ImageFailure(ImageResizerError):
    """Failure tied to a single image file."""

    reason = "failed"

    def __init__(self, path: PathLike, detail: Optional[str] = None) -> None:
        self.path = Path(path)
        message = f"{self.path}: {self.reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DecodeFailureError(_ImageFailure):
    """Raised when a file with an image extension cannot be decoded."""

    reason = "not a readable image"


class EncodeFailureError(_ImageFailure):
    """Raised when the resized JPEG cannot be written."""

    reason = "could not write JPEG output"


class ImageIOFailureError(_ImageFailure, OSError):
    """Raised for read faults that are not decode failures."""

    reason = "I/O failure"


class InvalidDimensionsError(_ImageFailure):
    """Raised when the scale would shrink an image below one pixel."""

    reason = "scaled size is empty"


class DestinationNotDirectoryError(ImageResizerError, NotADirectoryError):
    """Raised when the output path exists but is not a directory."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        super().__init__(f"Output path is not a directory: {self.path}")


class BatchResizeError(ImageResizerError):
    """
    Aggregate failure raised by the concurrent driver.

    Raised only after every unit has settled. ``failures`` holds each failed
    source path with the exception it raised; ``results`` holds the units
    that completed successfully.
    """

    def __init__(
        self,
        failures: Sequence[Tuple[Path, BaseException]],
        results: Optional[Sequence["ResizeResult"]] = None,
    ) -> None:
        self.failures: List[Tuple[Path, BaseException]] = list(failures)
        self.results: List["ResizeResult"] = list(results or [])
        total = len(self.failures) + len(self.results)
        lines = [f"{len(self.failures)} of {total} image(s) failed to resize"]
        lines.extend(f"  {path}: {exc}" for path, exc in self.failures)
        super().__init__("\n".join(lines))


__all__ = [
    "ImageResizerError",
    "SourceNotFoundError",
    "DecodeFailureError",
    "EncodeFailureError",
    "ImageIOFailureError",
    "InvalidDimensionsError",
    "DestinationNotDirectoryError",
    "BatchResizeError",
]
