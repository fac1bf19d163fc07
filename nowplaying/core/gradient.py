"""Dominant-color gradient extraction from artwork pixels (bounded K-means)."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

import numpy as np

from nowplaying.core.colors import ColorValue
from nowplaying.errors import ClusteringDegenerateError
from nowplaying.skins.models import GradientDirection, GradientSpec

logger = logging.getLogger(__name__)

MAX_SAMPLES = 6_000
MIN_ALPHA = 16
KMEANS_K = 3
MAX_KMEANS_ITERATIONS = 20
DISTINCT_THRESHOLD = 400


@dataclass(frozen=True, slots=True)
class Cluster:
    centroid: tuple[float, float, float]
    count: int

    def color(self) -> ColorValue:
        r, g, b = (int(round(min(255.0, max(0.0, channel)))) for channel in self.centroid)
        return ColorValue.rgb(r, g, b)


def artwork_key(data: bytes) -> str:
    """Identity of an artwork bitmap; equal bytes give equal keys."""
    return hashlib.sha1(data).hexdigest()


def decode_artwork(data: bytes) -> np.ndarray | None:
    """Decode encoded image bytes into an (H, W, 4) RGBA uint8 array."""
    from PySide6.QtGui import QImage

    image = QImage.fromData(data)
    if image.isNull():
        return None
    image = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = image.width(), image.height()
    if width == 0 or height == 0:
        return None
    stride = image.bytesPerLine()
    buffer = np.frombuffer(image.constBits(), dtype=np.uint8, count=stride * height)
    return buffer.reshape(height, stride)[:, : width * 4].reshape(height, width, 4).copy()


def sample_pixels(pixels: np.ndarray, max_samples: int = MAX_SAMPLES) -> np.ndarray:
    """Stride-sample opaque pixels as an (N, 3) float array, N <= max_samples.

    Accepts (H, W, 3|4) or (N, 3|4) arrays; RGB input counts as opaque.
    """
    array = np.asarray(pixels)
    if array.size == 0 or max_samples <= 0:
        return np.empty((0, 3), dtype=np.float64)
    array = array.reshape(-1, array.shape[-1])
    if array.shape[1] == 3:
        alpha = np.full((array.shape[0], 1), 255, dtype=array.dtype)
        array = np.hstack((array, alpha))

    step = max(array.shape[0] // max_samples, 1)
    strided = array[::step]
    opaque = strided[strided[:, 3] >= MIN_ALPHA]
    return opaque[:max_samples, :3].astype(np.float64)


def kmeans(
    samples: np.ndarray,
    k: int = KMEANS_K,
    max_iterations: int = MAX_KMEANS_ITERATIONS,
) -> list[Cluster]:
    """Cluster samples into k groups with evenly spaced deterministic seeds.

    Stops when assignments no longer change or after ``max_iterations``.
    An emptied cluster is re-seeded from a sample that shifts per iteration.
    """
    count = len(samples)
    if count == 0 or k <= 0:
        return []
    k = min(k, count)
    seeds = [min(index * count // k, count - 1) for index in range(k)]
    centroids = samples[seeds].copy()
    assignments: np.ndarray | None = None

    for iteration in range(max(1, max_iterations)):
        distances = ((samples[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        # argmin takes the lowest centroid index on equal distances.
        updated = distances.argmin(axis=1)
        stable = assignments is not None and np.array_equal(updated, assignments)
        assignments = updated

        reseeded = False
        for index in range(k):
            members = samples[assignments == index]
            if len(members):
                centroids[index] = members.mean(axis=0)
            else:
                centroids[index] = samples[(index + iteration) % count]
                reseeded = True
        if stable and not reseeded:
            break

    counts = np.bincount(assignments, minlength=k)
    return [
        Cluster(centroid=(float(c[0]), float(c[1]), float(c[2])), count=int(counts[index]))
        for index, c in enumerate(centroids)
    ]


def order_by_luminance(first: ColorValue, second: ColorValue) -> tuple[ColorValue, ColorValue]:
    if first.luminance() <= second.luminance():
        return first, second
    return second, first


def dominant_colors(pixels: np.ndarray) -> tuple[ColorValue, ColorValue]:
    """Return the two most populous distinct cluster colors, darker first.

    Clusters are ranked by population; equal populations keep the lower
    cluster index first. A cluster only counts if its squared RGB distance to
    every already chosen color exceeds ``DISTINCT_THRESHOLD``. Raises
    ClusteringDegenerateError when fewer than two such colors exist.
    """
    samples = sample_pixels(pixels)
    if len(samples) < 2:
        raise ClusteringDegenerateError(len(samples))

    clusters = kmeans(samples)
    ranked = sorted(enumerate(clusters), key=lambda item: (-item[1].count, item[0]))
    distinct: list[ColorValue] = []
    for _, cluster in ranked:
        if cluster.count == 0:
            continue
        color = cluster.color()
        if all(existing.distance_sq(color) > DISTINCT_THRESHOLD for existing in distinct):
            distinct.append(color)

    if len(distinct) < 2:
        raise ClusteringDegenerateError(len(distinct))
    return order_by_luminance(distinct[0], distinct[1])


def extract_gradient(
    pixels: np.ndarray,
    direction: GradientDirection = GradientDirection.VERTICAL,
) -> GradientSpec | None:
    """Derive a dark-to-light gradient from artwork, or None when too uniform."""
    try:
        start, end = dominant_colors(pixels)
    except ClusteringDegenerateError as exc:
        logger.debug("No gradient from artwork: %s", exc)
        return None
    return GradientSpec(start=start, end=end, direction=direction)
