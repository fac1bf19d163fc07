"""Tests for nowplaying.workers base and gradient workers."""

import numpy as np
import pytest
from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtGui import QImage

from nowplaying.skins.models import GradientDirection, GradientSpec
from nowplaying.workers.base_worker import BaseWorker
from nowplaying.workers.gradient_worker import GradientWorker


def _png(pixels: np.ndarray) -> bytes:
    height, width, _ = pixels.shape
    buffer_bytes = np.ascontiguousarray(pixels).tobytes()
    image = QImage(buffer_bytes, width, height, width * 4, QImage.Format.Format_RGBA8888).copy()
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return bytes(data)


class TestBaseWorker:
    """Tests for the BaseWorker class."""

    def test_base_worker_cancel(self):
        """Test cancel sets the event."""
        worker = BaseWorker()
        assert worker._is_cancelled is False
        worker.cancel()
        assert worker._cancel_event.is_set() is True
        assert worker._is_cancelled is True

    def test_base_worker_signals_exist(self):
        """Test all expected signals are defined."""
        worker = BaseWorker()
        for name in ("started", "finished", "error", "cancelled"):
            assert hasattr(worker, name)

    def test_base_worker_without_job_reports_error(self):
        """Test run() reports a missing _execute through the error signal."""
        worker = BaseWorker()
        errors = []
        worker.error.connect(errors.append)
        worker.run()
        assert errors == ["NotImplementedError"]

    def test_base_worker_returns_result_through_finished(self):
        """Test the _execute return value is emitted once."""

        class EchoWorker(BaseWorker):
            def _execute(self):
                return {"ok": True}

        worker = EchoWorker()
        results = []
        worker.finished.connect(results.append)
        worker.run()
        assert results == [{"ok": True}]

    def test_base_worker_cancelled_mid_job(self):
        """Test WorkerCancelled from _execute becomes the cancelled signal."""

        class StoppingWorker(BaseWorker):
            def _execute(self):
                self.cancel()
                self._raise_if_cancelled()
                return "unreachable"

        worker = StoppingWorker()
        events = []
        worker.cancelled.connect(lambda: events.append("cancelled"))
        worker.finished.connect(events.append)
        worker.run()
        assert events == ["cancelled"]


class TestGradientWorker:
    """Tests for the GradientWorker class."""

    @pytest.fixture
    def halves_png(self):
        """Artwork with a black top half and a white bottom half."""
        pixels = np.zeros((8, 8, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        pixels[4:, :, :3] = 255
        return _png(pixels)

    def _run(self, worker):
        events = {"finished": [], "error": [], "cancelled": []}
        worker.finished.connect(events["finished"].append)
        worker.error.connect(events["error"].append)
        worker.cancelled.connect(lambda: events["cancelled"].append(True))
        worker.run()
        return events

    def test_gradient_worker_emits_both_gradients(self, halves_png):
        """Test root and panel gradients keep their own directions."""
        worker = GradientWorker(
            artwork_key="k1",
            data=halves_png,
            panel_direction=GradientDirection.HORIZONTAL,
        )

        events = self._run(worker)

        (result,) = events["finished"]
        assert result["artwork_key"] == "k1"
        assert isinstance(result["root"], GradientSpec)
        assert result["root"].direction is GradientDirection.VERTICAL
        assert result["panel"].direction is GradientDirection.HORIZONTAL
        assert result["root"].start.luminance() < result["root"].end.luminance()
        assert events["error"] == []

    def test_gradient_worker_uniform_artwork(self):
        """Test single-color artwork finishes without gradients."""
        pixels = np.full((6, 6, 4), 200, dtype=np.uint8)
        worker = GradientWorker(artwork_key="k2", data=_png(pixels))

        events = self._run(worker)

        (result,) = events["finished"]
        assert result["root"] is None and result["panel"] is None
        assert result["message"]

    def test_gradient_worker_undecodable_artwork(self):
        """Test bytes that are not an image finish without gradients."""
        events = self._run(GradientWorker(artwork_key="k3", data=b"garbage"))

        (result,) = events["finished"]
        assert result["root"] is None
        assert "decoded" in result["message"]

    def test_gradient_worker_cancelled_before_run(self, halves_png):
        """Test a cancelled worker emits cancelled instead of finished."""
        worker = GradientWorker(artwork_key="k4", data=halves_png)
        worker.cancel()

        events = self._run(worker)

        assert events["cancelled"] == [True]
        assert events["finished"] == []
