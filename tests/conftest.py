"""Pytest configuration and fixtures."""
import numpy as np
import pytest
from PIL import Image

from svgrefine.types import ImageBuffer

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'


def wrap_svg(body: str) -> str:
    return f"{SVG_OPEN}{body}</svg>"


class FakeTracer:
    """Tracer returning fixed markup and remembering what it was given."""

    def __init__(self, markup: str):
        self.markup = markup
        self.calls = []

    def __call__(self, image, options):
        self.calls.append((image, options))
        return self.markup


@pytest.fixture
def svg():
    """Wrap path markup in an svg root."""
    return wrap_svg


@pytest.fixture
def uniform_image():
    """Factory for single-color RGBA buffers."""
    def make(width=50, height=50, color=(200, 200, 200, 255)):
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color
        return ImageBuffer(width, height, pixels)
    return make


@pytest.fixture
def square_image():
    """40x40 white image with a dark 16x16 square in the middle."""
    pixels = np.full((40, 40, 4), 255, dtype=np.uint8)
    pixels[12:28, 12:28, :3] = 20
    return ImageBuffer(40, 40, pixels)


@pytest.fixture
def fake_tracer():
    """Factory for tracers that return canned markup."""
    return FakeTracer


@pytest.fixture
def image_file(tmp_path):
    """Small PNG on disk."""
    path = tmp_path / "input.png"
    pixels = np.full((20, 20, 4), 255, dtype=np.uint8)
    pixels[5:15, 5:15, :3] = (200, 30, 30)
    Image.fromarray(pixels).save(path)
    return path
