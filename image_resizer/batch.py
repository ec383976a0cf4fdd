"""
Batch drivers that resize every image in a source tree.

``resize_images`` processes files one at a time and stops at the first
failure. ``resize_images_concurrent`` submits one job per file to a thread
pool, waits for every job to settle, and then reports all failures together.
"""

from __future__ import annotations

import logging
import math
import os
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .discovery import find_images
from .errors import BatchResizeError, DestinationNotDirectoryError
from .processing import (
    DEFAULT_BACKGROUND,
    NAMING_FLAT,
    Color,
    ResizeJob,
    ResizeResult,
    destination_for,
    resize_file,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class BatchResult:
    """Summary of a completed batch run."""

    discovered: int
    results: List[ResizeResult] = field(default_factory=list)
    elapsed_s: float = 0.0
    workers: int = 1

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_s * 1000.0


def default_worker_count() -> int:
    """Worker count used when none is configured."""
    return min(32, (os.cpu_count() or 1) + 4)


def plan_jobs(
    sources: Sequence[Path],
    source_root: PathLike,
    dest_dir: PathLike,
    scale: float,
    naming: str = NAMING_FLAT,
) -> List[ResizeJob]:
    """Build one job per source and warn about destinations shared by several sources."""
    jobs = [
        ResizeJob(
            source=source,
            destination=destination_for(source, source_root, dest_dir, naming),
            scale=scale,
        )
        for source in sources
    ]

    counts = Counter(job.destination for job in jobs)
    for destination, count in counts.items():
        if count > 1:
            logger.warning(
                "%d source images map to %s; only one will survive",
                count,
                destination,
            )
    return jobs


def _prepare(
    source_dir: PathLike,
    dest_dir: PathLike,
    scale: float,
    naming: str,
) -> List[ResizeJob]:
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be positive and finite, got {scale}")

    # Discovery runs first so a missing source never touches the destination.
    sources = find_images(source_dir)
    dest_path = Path(dest_dir)
    if dest_path.exists() and not dest_path.is_dir():
        raise DestinationNotDirectoryError(dest_path)
    dest_path.mkdir(parents=True, exist_ok=True)
    return plan_jobs(sources, source_dir, dest_dir, scale, naming)


def resize_images(
    source_dir: PathLike,
    dest_dir: PathLike,
    scale: float,
    naming: str = NAMING_FLAT,
    background: Color = DEFAULT_BACKGROUND,
) -> BatchResult:
    """
    Resize every image under ``source_dir`` sequentially.

    Files are handled in discovery order. The first failure propagates and the
    remaining files are skipped.

    Args:
        source_dir: Directory tree to scan for images
        dest_dir: Directory that receives the JPEG copies
        scale: Multiplier applied to width and height
        naming: ``flat`` or ``mirror`` destination layout
        background: RGB fill used where the output would be transparent

    Returns:
        BatchResult describing every resized image
    """
    started = time.perf_counter()
    jobs = _prepare(source_dir, dest_dir, scale, naming)
    logger.info("Sequentially resizing %d image(s) at scale %s", len(jobs), scale)

    batch = BatchResult(discovered=len(jobs), workers=1)
    for job in jobs:
        batch.results.append(resize_file(job, background))

    batch.elapsed_s = time.perf_counter() - started
    logger.info(
        "Sequential run finished: %d image(s) in %.1f ms",
        batch.processed,
        batch.elapsed_ms,
    )
    return batch


def resize_images_concurrent(
    source_dir: PathLike,
    dest_dir: PathLike,
    scale: float,
    max_workers: Optional[int] = None,
    naming: str = NAMING_FLAT,
    background: Color = DEFAULT_BACKGROUND,
) -> BatchResult:
    """
    Resize every image under ``source_dir`` on a thread pool.

    All jobs are submitted before any is awaited, and the call returns only
    once every job has finished. Failures do not cancel sibling jobs.

    Args:
        source_dir: Directory tree to scan for images
        dest_dir: Directory that receives the JPEG copies
        scale: Multiplier applied to width and height
        max_workers: Pool size; ``None`` picks a CPU-based default and ``0``
            starts one worker per image
        naming: ``flat`` or ``mirror`` destination layout
        background: RGB fill used where the output would be transparent

    Returns:
        BatchResult describing every resized image

    Raises:
        BatchResizeError: If any job failed, after all jobs have settled
    """
    if max_workers is not None and max_workers < 0:
        raise ValueError(f"max_workers must be non-negative, got {max_workers}")

    started = time.perf_counter()
    jobs = _prepare(source_dir, dest_dir, scale, naming)

    if max_workers is None:
        workers = default_worker_count()
    elif max_workers == 0:
        workers = len(jobs)
    else:
        workers = max_workers
    workers = max(1, min(workers, len(jobs))) if jobs else 1

    logger.info(
        "Concurrently resizing %d image(s) at scale %s with %d worker(s)",
        len(jobs),
        scale,
        workers,
    )

    batch = BatchResult(discovered=len(jobs), workers=workers)
    failures: List[Tuple[Path, BaseException]] = []

    if jobs:
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="resize"
        ) as executor:
            futures: Dict[Future, ResizeJob] = {
                executor.submit(resize_file, job, background): job for job in jobs
            }
            wait(futures)

        # Report in submission order so results line up with discovery order.
        for future, job in futures.items():
            exc = future.exception()
            if exc is None:
                batch.results.append(future.result())
            else:
                logger.error("Failed to resize %s: %s", job.source, exc)
                failures.append((job.source, exc))

    batch.elapsed_s = time.perf_counter() - started

    if failures:
        raise BatchResizeError(failures, batch.results)

    logger.info(
        "Concurrent run finished: %d image(s) in %.1f ms",
        batch.processed,
        batch.elapsed_ms,
    )
    return batch


__all__ = [
    "BatchResult",
    "default_worker_count",
    "plan_jobs",
    "resize_images",
    "resize_images_concurrent",
]
