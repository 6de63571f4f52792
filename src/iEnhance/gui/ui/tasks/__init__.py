"""Background worker helpers for GUI tasks."""

from .enhance_worker import EnhanceWorker, EnhanceWorkerSignals

__all__ = ["EnhanceWorker", "EnhanceWorkerSignals"]
