import threading
import time
from typing import Callable, Iterable


class IdAllocator:
    """
    Hands out candidate ids derived from the wall clock in milliseconds.

    Ids never repeat: a call in the same millisecond as the previous one (or
    after the clock stepped back) gets ``last + 1``.
    """

    def __init__(self, existing_ids: Iterable[str] = (), clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._last = max((int(i) for i in existing_ids if i.isdigit()), default=0)

    def next_id(self) -> str:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            self._last = max(now_ms, self._last + 1)
            return str(self._last)
