# =============================================================================
# Stats Accumulator
# =============================================================================
# Mutable counters of one run. The only state shared between documents that
# are dispatched concurrently.
# =============================================================================

"""Run counters with serialized updates."""

import threading

from ..models import StatsSnapshot

__all__ = ["RunStats"]


class RunStats:
    """
    Counters of the active run.

    Every update is a short synchronous critical section under a lock: no
    update awaits, so on an event loop none can be interleaved with another
    task, and the lock keeps them whole if a worker thread ever calls in.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset()

    def _reset(self) -> None:
        self.pages = 0
        self.current_document = 0
        self.total_cost = 0.0
        self.backups = 0
        self.updates = 0
        self.documents_examined = 0
        self.successful_verifications = 0
        self.unsuccessful_verifications = 0

    def reset(self) -> None:
        """Zero every counter. Called at the start of each run."""
        with self._lock:
            self._reset()

    def add_cost(self, cost: float) -> None:
        if cost < 0:
            raise ValueError(f"Request cost cannot be negative: {cost}")
        with self._lock:
            self.total_cost += cost

    def record_page(self) -> int:
        """Count a page fetch and return its 1-based number."""
        with self._lock:
            self.pages += 1
            return self.pages

    def record_document(self) -> int:
        """Count an examined document and return its ordinal within the run."""
        with self._lock:
            self.current_document += 1
            self.documents_examined += 1
            return self.current_document

    def record_backup(self) -> None:
        with self._lock:
            self.backups += 1

    def record_update(self) -> None:
        with self._lock:
            self.updates += 1

    def record_verification(self, passed: bool) -> None:
        with self._lock:
            if passed:
                self.successful_verifications += 1
            else:
                self.unsuccessful_verifications += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                pages=self.pages,
                current_document=self.current_document,
                total_cost=self.total_cost,
                backups=self.backups,
                updates=self.updates,
                documents_examined=self.documents_examined,
                successful_verifications=self.successful_verifications,
                unsuccessful_verifications=self.unsuccessful_verifications,
            )
