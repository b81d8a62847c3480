# src/permfactor/progress.py
from __future__ import annotations

import sys
import time


class Progress:
    """
    One-line progress bar for long scans, redrawn at most every
    ``throttle`` seconds. Disabled instances are silent no-ops.
    """

    BAR_LEN = 24

    def __init__(self, total: int, *, enabled: bool = True, stream=None, throttle: float = 0.05):
        self.total = max(1, int(total))
        self.enabled = enabled
        self.stream = stream or sys.stdout
        self.throttle = throttle
        self.start = time.perf_counter()
        self._last_draw = 0.0
        self._tick = 0

    def elapsed(self) -> float:
        return time.perf_counter() - self.start

    def update(self, done: int, label: str = "") -> None:
        if not self.enabled:
            return
        now = time.perf_counter()
        if now - self._last_draw < self.throttle:
            return
        self._last_draw = now
        self._tick += 1

        frac = min(max(done / self.total, 0.0), 1.0)
        fill = int(frac * self.BAR_LEN)
        bar = "#" * fill + "-" * (self.BAR_LEN - fill)
        rate = done / max(self.elapsed(), 1e-9)
        spin = "|/-\\"[self._tick % 4]
        self.stream.write(f"\r[{spin}] [{bar}] {int(frac * 100):3d}%  {rate:8.0f}/s  {label[:30]}")
        self.stream.flush()

    def done(self) -> None:
        if not self.enabled:
            return
        self.stream.write("\r" + " " * 80 + "\r")
        self.stream.flush()
