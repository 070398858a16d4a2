"""Tests for raster loading."""
import numpy as np
import pytest
from PIL import Image

from svgrefine.raster_ingest import image_from_array, load_image, save_image
from svgrefine.types import ImageBuffer, ImageBufferError


class TestLoadImage:
    """Test reading image files."""

    def test_rgba(self, image_file):
        image = load_image(image_file)
        assert (image.width, image.height) == (20, 20)
        assert image.pixels[10, 10].tolist() == [200, 30, 30, 255]

    def test_rgb_gets_alpha(self, tmp_path):
        path = tmp_path / "rgb.jpg"
        Image.new("RGB", (8, 4), (0, 0, 0)).save(path)
        image = load_image(path)
        assert image.pixels.shape == (4, 8, 4)
        assert (image.pixels[..., 3] == 255).all()

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "nope.png")

    def test_directory(self, tmp_path):
        with pytest.raises(ImageBufferError):
            load_image(tmp_path)

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "fake.png"
        path.write_text("hello")
        with pytest.raises(ImageBufferError):
            load_image(path)


class TestArrays:
    """Test array conversion."""

    def test_grayscale(self):
        image = image_from_array(np.full((3, 5), 7, dtype=np.uint8))
        assert (image.width, image.height) == (5, 3)
        assert image.pixels[0, 0].tolist() == [7, 7, 7, 255]

    def test_float(self):
        image = image_from_array(np.ones((2, 2, 3)) * 0.5)
        assert image.pixels[0, 0].tolist() == [128, 128, 128, 255]

    def test_bad_channels(self):
        with pytest.raises(ImageBufferError):
            image_from_array(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_bad_buffer_size(self):
        with pytest.raises(ImageBufferError):
            ImageBuffer.from_bytes(2, 2, b"\x00" * 15)

    def test_save_roundtrip(self, square_image, tmp_path):
        path = tmp_path / "nested" / "square.png"
        save_image(square_image, path)
        np.testing.assert_array_equal(load_image(path).pixels, square_image.pixels)
