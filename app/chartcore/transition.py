from __future__ import annotations

from dataclasses import replace
import math
from typing import Callable, Optional

from .frame_params import FrameParams

Easing = Callable[[float], float]


def _lerp_value(a: float, b: float, t: float) -> float:
    # Infinite sentinels (no volume in view) cannot be blended.
    if not (math.isfinite(a) and math.isfinite(b)):
        return b
    return a + (b - a) * t


def lerp(a: FrameParams, b: FrameParams, t: float) -> FrameParams:
    """Blend the axis extrema of two frames; every other field comes from `b`."""
    return replace(
        b,
        max_price=_lerp_value(a.max_price, b.max_price, t),
        min_price=_lerp_value(a.min_price, b.min_price, t),
        max_vol=_lerp_value(a.max_vol, b.max_vol, t),
        min_vol=_lerp_value(a.min_vol, b.min_vol, t),
    )


class FrameTransition:
    """
    Time-sampled blend from the frame on screen to the newest target frame.

    The owner supplies `now` (seconds, monotonic) from its frame clock. Retargeting
    starts from whatever is currently displayed, so the latest target always wins.
    """

    def __init__(self, duration: float = 0.1, easing: Optional[Easing] = None) -> None:
        self.duration = float(duration)
        self.easing = easing
        self._begin: Optional[FrameParams] = None
        self._end: Optional[FrameParams] = None
        self._started_at = 0.0

    @property
    def target(self) -> Optional[FrameParams]:
        return self._end

    def progress(self, now: float) -> float:
        if self._end is None or self._begin is None or self.duration <= 0:
            return 1.0
        return max(0.0, min(1.0, (now - self._started_at) / self.duration))

    def is_running(self, now: float) -> bool:
        return self.progress(now) < 1.0

    def retarget(self, target: FrameParams, now: float) -> None:
        current = self.sample(now)
        self._begin = current if current is not None else target
        self._end = target
        self._started_at = now

    def sample(self, now: float) -> Optional[FrameParams]:
        if self._end is None:
            return None
        if self._begin is None:
            return self._end
        t = self.progress(now)
        if t >= 1.0:
            return self._end
        if self.easing is not None:
            t = self.easing(t)
        return lerp(self._begin, self._end, t)
