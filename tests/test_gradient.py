"""Tests for artwork gradient extraction."""

import numpy as np
import pytest
from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtGui import QColor, QImage

from nowplaying.core.colors import ColorValue
from nowplaying.core.gradient import (
    MAX_SAMPLES,
    artwork_key,
    decode_artwork,
    dominant_colors,
    extract_gradient,
    kmeans,
    sample_pixels,
)
from nowplaying.errors import ClusteringDegenerateError, ErrorCode
from nowplaying.skins.models import GradientDirection


def _solid(height, width, rgba):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = rgba
    return image


def _halves():
    image = _solid(10, 10, (0, 0, 0, 255))
    image[5:, :] = (255, 255, 255, 255)
    return image


def _png_bytes(width, height, color):
    image = QImage(width, height, QImage.Format.Format_RGBA8888)
    image.fill(QColor(*color))
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return bytes(data)


def test_single_color_image_is_degenerate():
    pixels = _solid(8, 8, (120, 40, 200, 255))

    with pytest.raises(ClusteringDegenerateError) as excinfo:
        dominant_colors(pixels)

    assert excinfo.value.code is ErrorCode.CLUSTERING_DEGENERATE
    assert extract_gradient(pixels) is None


def test_black_and_white_halves_give_dark_to_light_gradient():
    gradient = extract_gradient(_halves())

    assert gradient is not None
    assert gradient.start == ColorValue.rgb(0, 0, 0)
    assert gradient.end == ColorValue.rgb(255, 255, 255)
    assert gradient.direction is GradientDirection.VERTICAL


def test_close_colors_merge_and_luminance_orders_the_pair():
    pixels = np.array(
        [(255, 0, 0, 255)] * 50 + [(250, 10, 10, 255)] * 30 + [(0, 0, 255, 255)] * 20,
        dtype=np.uint8,
    )

    start, end = dominant_colors(pixels)

    assert start == ColorValue.rgb(0, 0, 255)
    assert end.r >= 250 and end.g <= 10 and end.b <= 10


def test_transparent_pixels_are_ignored():
    pixels = _solid(10, 10, (255, 255, 255, 0))

    with pytest.raises(ClusteringDegenerateError) as excinfo:
        dominant_colors(pixels)
    assert excinfo.value.distinct == 0


def test_translucent_pixels_do_not_contribute():
    pixels = _halves()
    pixels[5:, :, 3] = 10

    assert extract_gradient(pixels) is None


def test_rgb_input_counts_as_opaque():
    assert len(sample_pixels(np.zeros((4, 4, 3), dtype=np.uint8))) == 16


@pytest.mark.parametrize("size", [100, 200])
def test_sample_count_is_capped(size):
    pixels = np.random.default_rng(7).integers(0, 256, (size, size, 4), dtype=np.uint8)
    pixels[..., 3] = 255

    assert len(sample_pixels(pixels)) == MAX_SAMPLES


def test_small_images_use_every_pixel():
    assert len(sample_pixels(_halves())) == 100


def test_extraction_is_deterministic():
    pixels = np.random.default_rng(3).integers(0, 256, (64, 64, 4), dtype=np.uint8)
    pixels[..., 3] = 255

    assert extract_gradient(pixels) == extract_gradient(pixels)


def test_kmeans_respects_iteration_cap():
    samples = sample_pixels(np.random.default_rng(11).integers(0, 256, (30, 30, 3), dtype=np.uint8))

    clusters = kmeans(samples, k=3, max_iterations=1)

    assert len(clusters) == 3
    assert sum(cluster.count for cluster in clusters) == len(samples)


def test_kmeans_with_fewer_samples_than_clusters():
    samples = np.array([[0.0, 0.0, 0.0], [255.0, 255.0, 255.0]])

    clusters = kmeans(samples, k=3)

    assert len(clusters) == 2
    assert [cluster.count for cluster in clusters] == [1, 1]
    assert kmeans(np.empty((0, 3))) == []


def test_direction_is_passed_through():
    gradient = extract_gradient(_halves(), GradientDirection.HORIZONTAL)

    assert gradient.direction is GradientDirection.HORIZONTAL


def test_decode_artwork_round_trips_png():
    pixels = decode_artwork(_png_bytes(6, 4, (10, 20, 30, 255)))

    assert pixels is not None
    assert pixels.shape == (4, 6, 4)
    assert tuple(pixels[0, 0]) == (10, 20, 30, 255)


def test_decode_artwork_rejects_garbage():
    assert decode_artwork(b"not an image") is None
    assert decode_artwork(b"") is None


def test_artwork_key_tracks_bytes():
    assert artwork_key(b"abc") == artwork_key(b"abc")
    assert artwork_key(b"abc") != artwork_key(b"abd")
