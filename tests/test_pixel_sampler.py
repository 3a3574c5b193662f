"""Tests for the pixel sampler."""
import numpy as np
import pytest

from meshgrad.pixel_sampler import PixelSampler, validate_dimensions
from meshgrad.types import ColorRGB, InvalidDimensionsError, PixelSourceError


class TestConstruction:
    """Test sampler construction and validation."""

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5), (5, -3)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(InvalidDimensionsError):
            PixelSampler(width, height, lambda x, y: (0, 0, 0))

    def test_validate_dimensions_accepts_positive(self):
        validate_dimensions(1, 1)

    def test_from_array_rejects_bad_shape(self):
        with pytest.raises(InvalidDimensionsError):
            PixelSampler.from_array(np.zeros((10, 10, 2), dtype=np.uint8))

    def test_from_array_grayscale(self):
        sampler = PixelSampler.from_array(np.full((4, 6), 77, dtype=np.uint8))
        assert (sampler.width, sampler.height) == (6, 4)
        assert sampler.sample(2, 2) == ColorRGB(77, 77, 77)

    def test_from_array_float(self):
        sampler = PixelSampler.from_array(np.full((4, 4, 3), 0.5))
        assert sampler.sample(0, 0) == ColorRGB(128, 128, 128)

    def test_from_array_rgba_ignores_alpha(self):
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[..., 0] = 9
        image[..., 3] = 0
        assert PixelSampler.from_array(image).sample(1, 1) == ColorRGB(9, 0, 0)


class TestSample:
    """Test point sampling and coordinate clamping."""

    def test_clamps_out_of_range(self, split_sampler):
        assert split_sampler.sample(-50, -50) == ColorRGB(0, 0, 0)
        assert split_sampler.sample(1000, 1000) == ColorRGB(255, 255, 255)

    def test_floors_coordinates(self):
        calls = []

        def fetch(x, y):
            calls.append((x, y))
            return (0, 0, 0)

        sampler = PixelSampler(10, 10, fetch)
        sampler.sample(2.7, 1.2)
        sampler.sample(9.99, -0.5)
        sampler.sample(12, 3)
        assert calls == [(2, 1), (9, 0), (9, 3)]

    def test_string_source(self):
        sampler = PixelSampler(3, 3, lambda x, y: "rgb(1, 2, 3)")
        assert sampler.sample(1, 1) == ColorRGB(1, 2, 3)
        assert sampler.sample_string(1, 1) == "rgb(1, 2, 3)"

    def test_source_failure(self):
        def fetch(x, y):
            raise RuntimeError("buffer released")

        sampler = PixelSampler(3, 3, fetch)
        with pytest.raises(PixelSourceError):
            sampler.sample(0, 0)


class TestRegionAndVariance:
    """Test region averaging and local variance."""

    def test_region_uniform(self, uniform_sampler):
        assert uniform_sampler.sample_region(50, 50, 10) == ColorRGB(128, 128, 128)

    def test_region_across_edge(self, split_sampler):
        """Three columns straddling the edge: one black, two white."""
        color = split_sampler.sample_region(60, 40, 4)
        assert color == ColorRGB(170, 170, 170)

    def test_variance_uniform_is_zero(self, uniform_sampler):
        assert uniform_sampler.local_variance(50, 50, 20) == 0

    def test_variance_at_edge(self, split_sampler):
        far = split_sampler.local_variance(10, 40, 5)
        edge = split_sampler.local_variance(59, 40, 5)
        assert far == 0
        assert edge > 100
