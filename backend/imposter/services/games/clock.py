"""Client-side countdown reconciled against polled snapshots.

The server never pushes ticks. Each poll carries the round's
``elapsed_seconds`` (computed when the response was built); the clock
anchors ``duration - elapsed`` at the local instant the snapshot arrived
and extrapolates from local time until the next poll replaces the anchor.
Only the discussion phase has a countdown.
"""

import math
import time
from typing import Callable, Iterable, List, Optional

DEFAULT_THRESHOLDS = (120, 60, 30, 0)


def format_time(seconds) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


class CountdownClock:

    def __init__(self, thresholds: Iterable[int] = DEFAULT_THRESHOLDS,
                 on_threshold: Optional[Callable[[int], None]] = None,
                 monotonic: Callable[[], float] = time.monotonic):
        self.thresholds = tuple(sorted(set(thresholds), reverse=True))
        self.on_threshold = on_threshold
        self._monotonic = monotonic
        self._key = None
        self._anchor_remaining = 0.0
        self._anchor_at = None
        self._last_seconds = None
        self._fired = set()

    @property
    def running(self) -> bool:
        return self._anchor_at is not None

    def sync(self, snapshot: dict, received_at: Optional[float] = None) -> int:
        """Re-anchor from a poll response and return the whole seconds remaining."""
        received_at = self._monotonic() if received_at is None else received_at
        lobby = snapshot.get('lobby') or {}
        rnd = snapshot.get('round') or {}
        key = (lobby.get('code'), rnd.get('round_number'), rnd.get('phase'))
        if key != self._key:
            self.reset()
            self._key = key

        if rnd.get('phase') != 'discussion':
            self._anchor_at = None
            self._anchor_remaining = 0.0
            return 0

        duration = float(lobby.get('round_duration') or 0)
        elapsed = float(rnd.get('elapsed_seconds') or 0)
        self._anchor_remaining = max(0.0, duration - elapsed)
        self._anchor_at = received_at
        return self.remaining(received_at)

    def remaining(self, at: Optional[float] = None) -> int:
        if self._anchor_at is None:
            return 0
        at = self._monotonic() if at is None else at
        left = self._anchor_remaining - max(0.0, at - self._anchor_at)
        return max(0, math.floor(left))

    def tick(self, at: Optional[float] = None) -> List[int]:
        """Fire each threshold the countdown has reached, once per round and phase."""
        if self._anchor_at is None:
            return []
        seconds = self.remaining(at)
        crossed = []
        for t in self.thresholds:
            if t in self._fired:
                continue
            reached = seconds == t or (self._last_seconds is not None and self._last_seconds > t >= seconds)
            if reached:
                self._fired.add(t)
                crossed.append(t)
                if self.on_threshold:
                    self.on_threshold(t)
        self._last_seconds = seconds
        return crossed

    def reset(self) -> None:
        self._fired = set()
        self._last_seconds = None
