"""
Batch image resizing with sequential and concurrent drivers.

This package discovers images under a source tree, writes scaled JPEG copies
to an output directory and times the two driver strategies against each other.
"""

from .batch import BatchResult, resize_images, resize_images_concurrent
from .benchmark import BenchmarkReport, run_benchmark
from .cleaner import clean_directory
from .config import ResizerConfig
from .discovery import find_images
from .errors import (
    BatchResizeError,
    DecodeFailureError,
    DestinationNotDirectoryError,
    EncodeFailureError,
    ImageIOFailureError,
    ImageResizerError,
    InvalidDimensionsError,
    SourceNotFoundError,
)
from .processing import ResizeJob, ResizeResult, compute_scaled_size, resize_file

__all__ = [
    "BatchResult",
    "BatchResizeError",
    "BenchmarkReport",
    "DecodeFailureError",
    "DestinationNotDirectoryError",
    "EncodeFailureError",
    "ImageIOFailureError",
    "ImageResizerError",
    "InvalidDimensionsError",
    "ResizeJob",
    "ResizeResult",
    "ResizerConfig",
    "SourceNotFoundError",
    "clean_directory",
    "compute_scaled_size",
    "find_images",
    "resize_file",
    "resize_images",
    "resize_images_concurrent",
    "run_benchmark",
]
