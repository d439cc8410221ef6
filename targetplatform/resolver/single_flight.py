"""
Single-assignment cell with single-flight computation.

The first caller of get() runs the computation; callers arriving while it
runs wait and observe its outcome. A successful value is kept forever.
A failure is handed to everyone who waited on that attempt; whether the
next fresh call retries or re-raises depends on cache_failures and, for
cached failures, on the cacheable predicate.
"""
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


class CellState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"


class _Flight:
    """One computation attempt shared by its leader and waiters."""

    def __init__(self):
        self.finished = threading.Event()
        self.value = None
        self.error: Optional[BaseException] = None


class SingleFlightCell(Generic[T]):
    """Holds at most one successfully computed value."""

    def __init__(self, cache_failures: bool = False,
                 cacheable: Optional[Callable[[BaseException], bool]] = None):
        self.cache_failures = cache_failures
        self.cacheable = cacheable
        self._state = CellState.NOT_STARTED
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._error_cached = False
        self._flight: Optional[_Flight] = None
        self._attempts = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CellState:
        with self._lock:
            return self._state

    @property
    def attempts(self) -> int:
        """Number of computations started so far."""
        with self._lock:
            return self._attempts

    @property
    def error(self) -> Optional[BaseException]:
        """Error of the last failed attempt, if the cell is in FAILED state."""
        with self._lock:
            return self._error

    def get(self, compute: Callable[[], T]) -> T:
        """
        Return the cached value, computing it if needed.

        Raises:
            Whatever compute raised, for the caller that ran it and for
            every caller that waited on the same attempt
        """
        with self._lock:
            if self._state is CellState.DONE:
                return self._value
            if self._state is CellState.FAILED and self._error_cached:
                raise self._error

            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()
                self._state = CellState.IN_PROGRESS
                self._attempts += 1

        if not leader:
            flight.finished.wait()
            if flight.error is not None:
                raise flight.error
            return flight.value

        try:
            value = compute()
        except BaseException as e:
            with self._lock:
                self._state = CellState.FAILED
                self._error = e
                self._error_cached = self.cache_failures and (self.cacheable is None or self.cacheable(e))
                self._flight = None
            flight.error = e
            flight.finished.set()
            raise

        with self._lock:
            self._value = value
            self._error = None
            self._error_cached = False
            self._state = CellState.DONE
            self._flight = None
        flight.value = value
        flight.finished.set()
        return value
