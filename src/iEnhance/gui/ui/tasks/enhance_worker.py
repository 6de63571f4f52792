"""Worker that runs photo enhancement on a Qt thread pool."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QRunnable, Signal

from ....core.enhancer import ImageEnhancer
from ....core.pixel_buffer import EnhancementOptions

_LOGGER = logging.getLogger(__name__)


class EnhanceWorkerSignals(QObject):
    """Signals emitted by :class:`EnhanceWorker`."""

    finished = Signal(object, int)
    """Emitted with the (possibly unchanged) encoded image and the job identifier."""

    error = Signal(int, str)
    """Emitted if an unexpected exception escapes the enhancer."""

    done = Signal(int)
    """Emitted once the worker has completed, even on failure."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class EnhanceWorker(QRunnable):
    """Enhance an encoded photo off the GUI thread."""

    def __init__(
        self,
        enhancer: ImageEnhancer,
        encoded: bytes,
        options: EnhancementOptions,
        *,
        job_id: int,
    ) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._enhancer = enhancer
        self._encoded = bytes(encoded)
        self._options = options
        self._job_id = int(job_id)
        self.signals = EnhanceWorkerSignals()

    @property
    def job_id(self) -> int:
        return self._job_id

    def run(self) -> None:  # type: ignore[override]
        """Enhance the photo and report the result to listeners."""

        try:
            result = self._enhancer.enhance(self._encoded, self._options)
            self.signals.finished.emit(result, self._job_id)
        except Exception as exc:  # pragma: no cover - enhancer already guards its own failures
            _LOGGER.exception("Enhancement job %d failed", self._job_id)
            self.signals.error.emit(self._job_id, str(exc))
            self.signals.finished.emit(self._encoded, self._job_id)
        finally:
            self.signals.done.emit(self._job_id)


__all__ = ["EnhanceWorker", "EnhanceWorkerSignals"]
