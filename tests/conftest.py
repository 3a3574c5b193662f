"""Shared fixtures for meshgrad tests."""
import numpy as np
import pytest

from meshgrad.pixel_sampler import PixelSampler


@pytest.fixture
def uniform_image():
    """100x100 mid-gray image."""
    return np.full((100, 100, 3), 128, dtype=np.uint8)


@pytest.fixture
def uniform_sampler(uniform_image):
    return PixelSampler.from_array(uniform_image)


@pytest.fixture
def split_image():
    """120x80 image, black on the left half and white on the right."""
    image = np.zeros((80, 120, 3), dtype=np.uint8)
    image[:, 60:] = 255
    return image


@pytest.fixture
def split_sampler(split_image):
    return PixelSampler.from_array(split_image)


@pytest.fixture
def horizontal_ramp():
    """120x120 image going from black at x=0 to white at the right edge."""
    ramp = np.linspace(0, 255, 120).round().astype(np.uint8)
    return np.repeat(np.repeat(ramp[None, :, None], 120, axis=0), 3, axis=2)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
