"""Worker that derives dynamic background gradients from artwork."""

from __future__ import annotations

from typing import TypedDict

from nowplaying.core.gradient import decode_artwork, dominant_colors
from nowplaying.errors import ClusteringDegenerateError
from nowplaying.skins.models import GradientDirection, GradientSpec
from nowplaying.workers.base_worker import BaseWorker


class GradientResult(TypedDict):
    artwork_key: str
    root: GradientSpec | None
    panel: GradientSpec | None
    message: str


class GradientWorker(BaseWorker):
    """Clusters one artwork bitmap off the UI thread.

    Emits ``finished`` with a GradientResult; both gradients are None when
    the artwork could not be decoded or is too uniform.
    """

    def __init__(
        self,
        *,
        artwork_key: str,
        data: bytes,
        root_direction: GradientDirection = GradientDirection.VERTICAL,
        panel_direction: GradientDirection = GradientDirection.VERTICAL,
    ) -> None:
        super().__init__()
        self._artwork_key = artwork_key
        self._data = data
        self._root_direction = root_direction
        self._panel_direction = panel_direction

    @property
    def artwork_key(self) -> str:
        return self._artwork_key

    def _execute(self) -> GradientResult:
        pixels = decode_artwork(self._data)
        self._raise_if_cancelled()
        if pixels is None:
            return self._result(None, None, "Artwork could not be decoded")
        try:
            start, end = dominant_colors(pixels)
        except ClusteringDegenerateError as exc:
            return self._result(None, None, exc.message)
        self._raise_if_cancelled()
        return self._result(
            GradientSpec(start, end, self._root_direction),
            GradientSpec(start, end, self._panel_direction),
            "Gradient extracted",
        )

    def _result(
        self,
        root: GradientSpec | None,
        panel: GradientSpec | None,
        message: str,
    ) -> GradientResult:
        return {
            "artwork_key": self._artwork_key,
            "root": root,
            "panel": panel,
            "message": message,
        }
