"""
Tests for the sequential and concurrent batch drivers.

Both drivers are exercised against the same source trees so their output
sets can be compared directly.
"""

import logging

import numpy as np
import pytest
from PIL import Image

from image_resizer.batch import (
    default_worker_count,
    plan_jobs,
    resize_images,
    resize_images_concurrent,
)
from image_resizer.errors import (
    BatchResizeError,
    DecodeFailureError,
    DestinationNotDirectoryError,
    InvalidDimensionsError,
    SourceNotFoundError,
)
from image_resizer.processing import NAMING_MIRROR
from tests.test_fixtures import write_image

DRIVERS = [
    pytest.param(resize_images, id="sequential"),
    pytest.param(resize_images_concurrent, id="concurrent"),
]


def output_files(directory):
    return sorted(
        p.relative_to(directory).as_posix()
        for p in directory.rglob("*")
        if p.is_file()
    )


def image_size(path):
    with Image.open(path) as image:
        return image.size


@pytest.mark.parametrize("driver", DRIVERS)
def test_scales_every_image(driver, source_dir, dest_dir):
    """a.png (100x50) and b.jpg (40x40) at 2.0 become a.jpg and b.jpg."""
    result = driver(source_dir, dest_dir, 2.0)

    assert output_files(dest_dir) == ["a.jpg", "b.jpg"]
    assert image_size(dest_dir / "a.jpg") == (200, 100)
    assert image_size(dest_dir / "b.jpg") == (80, 80)
    assert result.discovered == 2
    assert result.processed == 2
    assert result.elapsed_ms >= 0


@pytest.mark.parametrize("driver", DRIVERS)
def test_empty_source_produces_no_output(driver, empty_source_dir, dest_dir):
    result = driver(empty_source_dir, dest_dir, 2.0)

    assert result.discovered == 0
    assert result.results == []
    assert output_files(dest_dir) == []


@pytest.mark.parametrize("driver", DRIVERS)
def test_missing_source_propagates_not_found(driver, tmp_path, dest_dir):
    with pytest.raises(SourceNotFoundError):
        driver(tmp_path / "missing", dest_dir, 2.0)

    assert not dest_dir.exists()


@pytest.mark.parametrize("driver", DRIVERS)
def test_rejects_non_positive_scale(driver, source_dir, dest_dir):
    with pytest.raises(ValueError, match="scale must be positive"):
        driver(source_dir, dest_dir, 0)


@pytest.mark.parametrize("scale", [float("nan"), float("inf")])
@pytest.mark.parametrize("driver", DRIVERS)
def test_rejects_non_finite_scale(driver, scale, source_dir, dest_dir):
    with pytest.raises(ValueError, match="finite"):
        driver(source_dir, dest_dir, scale)

    assert not dest_dir.exists()


@pytest.mark.parametrize("driver", DRIVERS)
def test_destination_file_is_rejected(driver, source_dir, dest_dir):
    dest_dir.write_text("keep me", encoding="utf-8")

    with pytest.raises(DestinationNotDirectoryError) as excinfo:
        driver(source_dir, dest_dir, 2.0)

    assert excinfo.value.path == dest_dir
    assert dest_dir.read_text(encoding="utf-8") == "keep me"


def test_drivers_produce_identical_outputs(source_dir, tmp_path):
    write_image(source_dir / "nested" / "c.jpeg", (33, 17), color=(5, 250, 90))
    sequential_dir = tmp_path / "sequential"
    concurrent_dir = tmp_path / "concurrent"

    resize_images(source_dir, sequential_dir, 1.5)
    resize_images_concurrent(source_dir, concurrent_dir, 1.5, max_workers=3)

    names = output_files(sequential_dir)
    assert names == output_files(concurrent_dir) == ["a.jpg", "b.jpg", "c.jpg"]
    for name in names:
        with Image.open(sequential_dir / name) as left, Image.open(
            concurrent_dir / name
        ) as right:
            assert np.array_equal(np.asarray(left), np.asarray(right))


class TestBasenameCollisions:
    """Files sharing a basename in different subdirectories."""

    @pytest.fixture
    def colliding_source(self, tmp_path):
        root = tmp_path / "images"
        write_image(root / "first" / "photo.png", (10, 10))
        write_image(root / "second" / "photo.png", (20, 20))
        return root

    def test_sequential_last_in_discovery_order_wins(self, colliding_source, dest_dir):
        resize_images(colliding_source, dest_dir, 2.0)

        assert output_files(dest_dir) == ["photo.jpg"]
        assert image_size(dest_dir / "photo.jpg") == (40, 40)

    def test_concurrent_leaves_exactly_one_file(self, colliding_source, dest_dir):
        resize_images_concurrent(colliding_source, dest_dir, 2.0, max_workers=0)

        assert output_files(dest_dir) == ["photo.jpg"]
        assert image_size(dest_dir / "photo.jpg") in {(20, 20), (40, 40)}

    @pytest.mark.parametrize("driver", DRIVERS)
    def test_mirror_naming_keeps_both(self, driver, colliding_source, dest_dir):
        driver(colliding_source, dest_dir, 2.0, naming=NAMING_MIRROR)

        assert output_files(dest_dir) == ["first/photo.jpg", "second/photo.jpg"]

    def test_collision_is_logged(self, colliding_source, dest_dir, caplog):
        sources = sorted(colliding_source.rglob("*.png"))

        with caplog.at_level(logging.WARNING, logger="image_resizer.batch"):
            jobs = plan_jobs(sources, colliding_source, dest_dir, 2.0)

        assert len(jobs) == 2
        assert "2 source images map to" in caplog.text


class TestFailurePolicy:
    """Fail-fast for the sequential driver, fail-together for the concurrent one."""

    @pytest.fixture
    def source_with_broken_image(self, source_dir):
        # Sorted first, so the sequential driver hits it before anything else.
        (source_dir / "0_broken.png").write_bytes(b"not an image")
        return source_dir

    def test_sequential_stops_at_first_failure(self, source_with_broken_image, dest_dir):
        with pytest.raises(DecodeFailureError) as excinfo:
            resize_images(source_with_broken_image, dest_dir, 2.0)

        assert excinfo.value.path.name == "0_broken.png"
        assert output_files(dest_dir) == []

    def test_concurrent_finishes_siblings_before_raising(
        self, source_with_broken_image, dest_dir
    ):
        with pytest.raises(BatchResizeError) as excinfo:
            resize_images_concurrent(source_with_broken_image, dest_dir, 2.0)

        error = excinfo.value
        assert [path.name for path, _ in error.failures] == ["0_broken.png"]
        assert isinstance(error.failures[0][1], DecodeFailureError)
        assert sorted(r.destination.name for r in error.results) == ["a.jpg", "b.jpg"]
        assert output_files(dest_dir) == ["a.jpg", "b.jpg"]
        assert "1 of 3 image(s) failed" in str(error)

    @pytest.fixture
    def source_with_single_pixel(self, tmp_path):
        root = tmp_path / "dots"
        write_image(root / "dot.png", (1, 1))
        return root

    def test_sequential_reports_empty_output_size(
        self, source_with_single_pixel, dest_dir
    ):
        with pytest.raises(InvalidDimensionsError) as excinfo:
            resize_images(source_with_single_pixel, dest_dir, 0.5)

        assert excinfo.value.path.name == "dot.png"
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert output_files(dest_dir) == []

    def test_concurrent_reports_empty_output_size(
        self, source_with_single_pixel, dest_dir
    ):
        with pytest.raises(BatchResizeError) as excinfo:
            resize_images_concurrent(source_with_single_pixel, dest_dir, 0.5)

        [(path, exc)] = excinfo.value.failures
        assert path.name == "dot.png"
        assert isinstance(exc, InvalidDimensionsError)
        assert excinfo.value.results == []

    def test_concurrent_aggregates_every_failure(self, source_dir, dest_dir):
        (source_dir / "bad1.png").write_bytes(b"junk")
        (source_dir / "bad2.jpg").write_bytes(b"junk")

        with pytest.raises(BatchResizeError) as excinfo:
            resize_images_concurrent(source_dir, dest_dir, 2.0, max_workers=2)

        failed = sorted(path.name for path, _ in excinfo.value.failures)
        assert failed == ["bad1.png", "bad2.jpg"]
        assert len(excinfo.value.results) == 2


class TestWorkerPool:
    """Worker count selection for the concurrent driver."""

    def test_zero_means_one_worker_per_image(self, source_dir, dest_dir):
        result = resize_images_concurrent(source_dir, dest_dir, 1.0, max_workers=0)

        assert result.workers == 2

    def test_default_is_capped_by_image_count(self, source_dir, dest_dir):
        result = resize_images_concurrent(source_dir, dest_dir, 1.0)

        assert result.workers == min(default_worker_count(), 2)

    def test_explicit_worker_count(self, source_dir, dest_dir):
        result = resize_images_concurrent(source_dir, dest_dir, 1.0, max_workers=1)

        assert result.workers == 1
        assert result.processed == 2

    def test_negative_worker_count_rejected(self, source_dir, dest_dir):
        with pytest.raises(ValueError, match="max_workers"):
            resize_images_concurrent(source_dir, dest_dir, 1.0, max_workers=-1)

    def test_default_worker_count_bounds(self):
        assert 1 <= default_worker_count() <= 32
