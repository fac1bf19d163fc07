"""QObject worker base for engine jobs that run on a QThread."""

from __future__ import annotations

import logging
from threading import Event

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class WorkerCancelled(Exception):
    """Raised inside ``_execute`` to abandon a cancelled job."""


class BaseWorker(QObject):
    """Runs ``_execute`` once and reports the outcome through signals.

    Exactly one of ``finished``, ``cancelled`` or ``error`` follows
    ``started``. Subclasses call ``_raise_if_cancelled`` between expensive
    steps; the job itself never raises out of ``run``.
    """

    started = Signal()
    finished = Signal(object)           # value returned by _execute
    error = Signal(str)
    cancelled = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._cancel_event = Event()

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def _is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def _raise_if_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise WorkerCancelled()

    def run(self) -> None:
        self.started.emit()
        try:
            self._raise_if_cancelled()
            result = self._execute()
        except WorkerCancelled:
            self.cancelled.emit()
        except Exception as exc:
            logger.exception("%s failed", type(self).__name__)
            self.error.emit(str(exc) or type(exc).__name__)
        else:
            self.finished.emit(result)

    def _execute(self) -> object:
        raise NotImplementedError
