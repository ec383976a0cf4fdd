"""Time the sequential and concurrent drivers back to back."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .batch import resize_images, resize_images_concurrent
from .cleaner import clean_directory
from .config import ResizerConfig

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkReport:
    """Timings from a benchmark run, in milliseconds."""

    sequential_ms: float
    concurrent_ms: float
    images: int
    workers: int
    rounds: int = 1
    sequential_samples_ms: List[float] = field(default_factory=list)
    concurrent_samples_ms: List[float] = field(default_factory=list)

    @property
    def improvement_pct(self) -> Optional[float]:
        return improvement_percentage(self.sequential_ms, self.concurrent_ms)


def improvement_percentage(sequential_ms: float, concurrent_ms: float) -> Optional[float]:
    """
    Percentage of sequential time saved by the concurrent run.

    Returns None when the sequential time is zero and the ratio is undefined.
    """
    if sequential_ms <= 0:
        return None
    return (sequential_ms - concurrent_ms) / sequential_ms * 100.0


def run_benchmark(config: ResizerConfig) -> BenchmarkReport:
    """
    Run both drivers ``config.rounds`` times and report mean timings.

    The destination directory is cleaned before every timed run.
    """
    sequential_samples: List[float] = []
    concurrent_samples: List[float] = []
    images = 0
    workers = 1

    for round_index in range(config.rounds):
        logger.info("Benchmark round %d/%d", round_index + 1, config.rounds)

        clean_directory(config.dest_dir)
        sequential = resize_images(
            config.source_dir,
            config.dest_dir,
            config.scale,
            naming=config.naming,
            background=config.background,
        )
        sequential_samples.append(sequential.elapsed_ms)

        clean_directory(config.dest_dir)
        concurrent = resize_images_concurrent(
            config.source_dir,
            config.dest_dir,
            config.scale,
            max_workers=config.max_workers,
            naming=config.naming,
            background=config.background,
        )
        concurrent_samples.append(concurrent.elapsed_ms)

        images = sequential.processed
        workers = concurrent.workers

    return BenchmarkReport(
        sequential_ms=float(np.mean(sequential_samples)),
        concurrent_ms=float(np.mean(concurrent_samples)),
        images=images,
        workers=workers,
        rounds=config.rounds,
        sequential_samples_ms=sequential_samples,
        concurrent_samples_ms=concurrent_samples,
    )


def format_report(report: BenchmarkReport) -> str:
    """Render the report as the three console lines."""
    improvement = report.improvement_pct
    ratio = "n/a" if improvement is None else f"{improvement:.2f}%"
    return "\n".join(
        [
            f"Sequential: {report.sequential_ms:.0f} ms",
            f"Concurrent ({report.workers} workers): {report.concurrent_ms:.0f} ms",
            f"Performance ratio: {ratio}",
        ]
    )


__all__ = [
    "BenchmarkReport",
    "format_report",
    "improvement_percentage",
    "run_benchmark",
]
