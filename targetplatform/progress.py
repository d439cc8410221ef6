"""
Progress reporting and cooperative cancellation.

A ProgressMonitor owns the absolute work total and a cancellation flag.
SubMonitor divides a share of that total into local units; split() hands a
part of the remaining share to a child monitor. Because the number of
children is often unknown until some work has been done (e.g. references
are only known after a repository loaded), set_work_remaining() re-divides
whatever share is left over the new unit count.
"""
import threading
from typing import Callable, Optional

from targetplatform.errors import ResolutionCanceledError


class ProgressMonitor:
    """Root progress monitor with a thread-safe cancellation flag."""

    def __init__(self, total: float = 100.0, on_progress: Optional[Callable[[float], None]] = None):
        self.total = float(total)
        self.completed = 0.0
        self._on_progress = on_progress
        self._canceled = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        self._canceled.set()

    def is_canceled(self) -> bool:
        return self._canceled.is_set()

    def check_canceled(self) -> None:
        """Raise ResolutionCanceledError if cancel() was called."""
        if self.is_canceled():
            raise ResolutionCanceledError("Resolution was canceled")

    def advance(self, amount: float) -> None:
        """Record absolute progress, clamped to the total."""
        if amount <= 0:
            return
        with self._lock:
            self.completed = min(self.total, self.completed + amount)
            fraction = self.completed / self.total if self.total else 1.0
        if self._on_progress is not None:
            self._on_progress(fraction)

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0


class SubMonitor:
    """
    Weighted sub-budget of a ProgressMonitor.

    Local work units map onto an absolute share of the root total.
    """

    def __init__(self, root: ProgressMonitor, share: float, work: float):
        self.root = root
        self._share = float(share)
        self._work = float(work)

    @classmethod
    def convert(cls, monitor=None, work: float = 100) -> 'SubMonitor':
        """
        Wrap a monitor into a SubMonitor with the given number of local units.

        Accepts None (progress is discarded), a ProgressMonitor, or a
        SubMonitor (which is re-divided in place of its remaining share).
        """
        if monitor is None:
            root = ProgressMonitor()
            return cls(root, root.total, work)
        if isinstance(monitor, SubMonitor):
            return cls(monitor.root, monitor._take_all(), work)
        return cls(monitor, max(monitor.total - monitor.completed, 0.0), work)

    def _take(self, units: float) -> float:
        if self._work <= 0 or units <= 0:
            return 0.0
        units = min(units, self._work)
        amount = self._share * units / self._work
        self._share -= amount
        self._work -= units
        return amount

    def _take_all(self) -> float:
        amount = self._share
        self._share = 0.0
        self._work = 0.0
        return amount

    def set_work_remaining(self, work: float) -> 'SubMonitor':
        """Re-divide the remaining share over a new number of local units."""
        self._work = max(float(work), 0.0)
        return self

    def worked(self, units: float = 1) -> None:
        self.root.advance(self._take(units))

    def split(self, units: float) -> 'SubMonitor':
        """
        Create a child monitor consuming the given local units.

        Checks for cancellation first.
        """
        self.check_canceled()
        return SubMonitor(self.root, self._take(units), 100)

    def done(self) -> None:
        """Report whatever share is still unreported."""
        self.root.advance(self._take_all())

    def is_canceled(self) -> bool:
        return self.root.is_canceled()

    def check_canceled(self) -> None:
        self.root.check_canceled()
