import threading
from collections import deque, namedtuple

import numpy as np

SamplePoint = namedtuple("SamplePoint", "x y inside")

# only the most recent points are kept for drawing
MAX_POINTS = 5000


def stream_points(batch_size=200, seed=None):
    """Yield classified points forever, drawing ``batch_size`` at a time."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size!r}")
    rng = np.random.default_rng(seed)
    while True:
        x = rng.uniform(-1.0, 1.0, batch_size)
        y = rng.uniform(-1.0, 1.0, batch_size)
        inside = x * x + y * y <= 1.0
        for px, py, pin in zip(x.tolist(), y.tolist(), inside.tolist()):
            yield SamplePoint(px, py, pin)


class RunningEstimate:
    """Live tally fed by a point stream, safe to read from another thread."""

    def __init__(self, max_points=MAX_POINTS):
        self._lock = threading.Lock()
        self._recent = deque(maxlen=max_points)
        self.total = 0
        self.inside = 0

    def add(self, point):
        with self._lock:
            self.total += 1
            if point.inside:
                self.inside += 1
            self._recent.append(point)

    def extend(self, points):
        for point in points:
            self.add(point)

    def estimate(self):
        with self._lock:
            if self.total == 0:
                return 0.0
            return 4.0 * self.inside / self.total

    def recent(self):
        with self._lock:
            return list(self._recent)

    def reset(self):
        with self._lock:
            self.total = 0
            self.inside = 0
            self._recent.clear()
