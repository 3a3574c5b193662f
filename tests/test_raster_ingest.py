"""Tests for raster ingestion and preprocessing."""
import numpy as np
import pytest
from PIL import Image

from meshgrad.raster_ingest import create_smoothed_buffer, ingest, ingest_from_array
from meshgrad.types import VectorizationError


class TestIngest:
    """Test file ingestion."""

    def test_rgb_png(self, tmp_path):
        path = tmp_path / "rgb.png"
        Image.new('RGB', (12, 8), (10, 20, 30)).save(path)
        result = ingest(path)
        assert result.image.shape == (8, 12, 3)
        assert result.image.dtype == np.uint8
        assert (result.width, result.height) == (12, 8)
        assert not result.has_alpha
        assert tuple(result.image[0, 0]) == (10, 20, 30)

    def test_transparent_on_white(self, tmp_path):
        path = tmp_path / "rgba.png"
        Image.new('RGBA', (4, 4), (0, 0, 0, 0)).save(path)
        result = ingest(path)
        assert result.has_alpha
        assert tuple(result.image[2, 2]) == (255, 255, 255)

    def test_grayscale(self, tmp_path):
        path = tmp_path / "gray.png"
        Image.new('L', (5, 5), 100).save(path)
        result = ingest(path)
        assert result.image.shape == (5, 5, 3)
        assert tuple(result.image[0, 0]) == (100, 100, 100)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ingest(tmp_path / "nope.png")

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("not an image")
        with pytest.raises(VectorizationError):
            ingest(path)

    def test_directory(self, tmp_path):
        with pytest.raises(VectorizationError):
            ingest(tmp_path)


class TestIngestFromArray:

    def test_grayscale(self):
        result = ingest_from_array(np.full((3, 4), 50, dtype=np.uint8))
        assert result.image.shape == (3, 4, 3)

    def test_float(self):
        result = ingest_from_array(np.ones((2, 2, 3)))
        assert result.image.dtype == np.uint8
        assert result.image.max() == 255

    def test_rgba_composited(self):
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[0, 0] = (0, 0, 0, 255)
        result = ingest_from_array(image)
        assert result.has_alpha
        assert tuple(result.image[0, 0]) == (0, 0, 0)
        assert tuple(result.image[1, 1]) == (255, 255, 255)

    def test_bad_channels(self):
        with pytest.raises(VectorizationError):
            ingest_from_array(np.zeros((2, 2, 5), dtype=np.uint8))


class TestSmoothedBuffer:
    """Test resize and blur preprocessing."""

    def test_uniform_unchanged(self, uniform_image):
        result = create_smoothed_buffer(uniform_image)
        assert np.array_equal(result, uniform_image)

    def test_input_not_modified(self, split_image):
        before = split_image.copy()
        create_smoothed_buffer(split_image, scale=0.5, blur_sigma=2.0)
        assert np.array_equal(split_image, before)

    def test_scale(self, split_image):
        result = create_smoothed_buffer(split_image, scale=0.5, blur_sigma=0)
        assert result.shape == (40, 60, 3)

    def test_blur_softens_edge(self, split_image):
        result = create_smoothed_buffer(split_image, blur_sigma=2.0)
        assert 0 < result[40, 59, 0] < 255
        assert result[40, 0, 0] == 0
        assert result[40, 119, 0] == 255

    def test_noop(self, split_image):
        result = create_smoothed_buffer(split_image, scale=1.0, blur_sigma=0)
        assert np.array_equal(result, split_image)
