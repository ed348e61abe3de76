"""buffer.py - Per-invocation history of recent log events.

InvocationBuffer keeps two windows over the events of the current invocation:

    first_logs  The first ``capacity`` events. Never evicted once filled;
                answers "how did this invocation start?".
    last_logs   The most recent ``capacity`` events after the first window,
                FIFO evicted; answers "what happened right before the
                problem?".

Every event is counted, but memory is bounded at ``2 * capacity`` condensed
events regardless of how chatty the invocation is. With capacity 5 and 11
events, first_logs holds events 1-5 and last_logs holds events 7-11.

The buffer is bound to the invocation id that was current when it last reset.
Whenever the environment reports a different id, the buffer empties itself
before doing anything else, so one warm container never leaks context from a
previous request into the next.

Design decisions:
    - ``collections.deque(maxlen=N)`` gives O(1) append with automatic
      eviction of the oldest entry in the last window.
    - Snapshots are tuples, so an event that carries one cannot observe
      later additions.
    - No locking: one invocation owns the process at a time.
"""

from collections import deque
from typing import NamedTuple, Optional, Tuple

from .environment import Environment, default_environment
from .event import LogEvent

DEFAULT_CAPACITY = 5


class BufferSnapshot(NamedTuple):
    """Read-only view of an InvocationBuffer at one point in time."""

    first_logs: Tuple[LogEvent, ...]
    last_logs: Tuple[LogEvent, ...]
    capacity: int


class InvocationBuffer:
    """Bounded first-N / last-N history for the current invocation.

    Example:
        >>> from lambdalog.environment import StaticEnvironment
        >>> env = StaticEnvironment(invocation_id="req-1")
        >>> buf = InvocationBuffer(capacity=2, environment=env)
        >>> buf.count()
        0
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        environment: Optional[Environment] = None,
    ) -> None:
        """Initialise an empty buffer bound to the current invocation id.

        Args:
            capacity: Size of each window. Must be positive.
            environment: Source of the ambient invocation id. Defaults to the
                process environment.

        Raises:
            ValueError: If ``capacity`` is less than 1.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._environment = environment or default_environment()
        self._invocation_id = self._environment.invocation_id
        self._count = 0
        self._first: deque = deque()
        self._last: deque = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def invocation_id(self) -> Optional[str]:
        """The invocation id this buffer's contents belong to."""
        return self._invocation_id

    def add(self, event: LogEvent) -> None:
        """Record one event for the current invocation.

        The stored copy is condensed (no stack, no nested buffer) so history
        never nests inside history.
        """
        self._check_invocation()
        self._count += 1
        entry = event.condensed()
        if len(self._first) < self._capacity:
            self._first.append(entry)
        if self._count > self._capacity:
            self._last.append(entry)

    def snapshot(self) -> BufferSnapshot:
        self._check_invocation()
        return BufferSnapshot(tuple(self._first), tuple(self._last), self._capacity)

    def count(self) -> int:
        """Total number of events added during the current invocation."""
        self._check_invocation()
        return self._count

    def reset(self, invocation_id: Optional[str] = None) -> None:
        """Empty both windows and rebind to ``invocation_id``."""
        self._count = 0
        self._first.clear()
        self._last.clear()
        self._invocation_id = invocation_id

    def _check_invocation(self) -> None:
        current = self._environment.invocation_id
        if current != self._invocation_id:
            self.reset(current)

    def __len__(self) -> int:
        """Number of events currently retained (not the total count)."""
        return len(self._first) + len(self._last)
