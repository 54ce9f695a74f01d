from __future__ import annotations

import math
from typing import Optional, Tuple


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class ViewportState:
    """
    Horizontal window over the series: candle pixel width plus scroll offset.

    `start_offset` is measured along a virtual strip where candle `i` begins at
    `i * candle_width`, so 0 shows the oldest candle at the left edge.
    """

    def __init__(self, candle_count: int, min_visible_count: int = 14) -> None:
        if candle_count < 1:
            raise ValueError("candle_count must be positive")
        self.candle_count = int(candle_count)
        self.min_visible_count = int(min_visible_count)
        self.candle_width: float = 1.0
        self.start_offset: float = 0.0
        self.width: Optional[float] = None

    @property
    def is_initialized(self) -> bool:
        return self.width is not None

    def min_candle_width(self, w: float) -> float:
        return w / self.candle_count

    def max_candle_width(self, w: float) -> float:
        return w / min(self.min_visible_count, self.candle_count)

    def max_start_offset(self, w: float, candle_width: float) -> float:
        visible = w / candle_width
        return max(0.0, candle_width * (self.candle_count - visible))

    def clamp_candle_width(self, candle_width: float, w: float) -> float:
        return _clamp(candle_width, self.min_candle_width(w), self.max_candle_width(w))

    def clamp_start_offset(self, start_offset: float, w: float, candle_width: float) -> float:
        return _clamp(start_offset, 0.0, self.max_start_offset(w, candle_width))

    def initialize(self, w: float, initial_visible_count: int) -> None:
        if w <= 0:
            raise ValueError(f"viewport width must be positive, got {w}")
        count = min(self.candle_count, int(initial_visible_count))
        self.candle_width = w / count
        # Right-align the most recent candles.
        self.start_offset = (self.candle_count - count) * self.candle_width
        self.width = w

    def resize(self, w: float) -> None:
        if w <= 0:
            raise ValueError(f"viewport width must be positive, got {w}")
        self.candle_width = self.clamp_candle_width(self.candle_width, w)
        self.start_offset = self.clamp_start_offset(self.start_offset, w, self.candle_width)
        self.width = w

    def layout(self, w: float, initial_visible_count: int) -> bool:
        """Apply a layout pass; returns True when the state changed width."""
        if self.width is not None and w == self.width:
            return False
        if self.width is None:
            self.initialize(w, initial_visible_count)
        else:
            self.resize(w)
        return True

    def visible_range(self, w: Optional[float] = None) -> Tuple[int, int]:
        if w is None:
            w = self.width
        if w is None:
            raise RuntimeError("viewport has not been laid out")
        start = int(math.floor(self.start_offset / self.candle_width))
        count = int(math.ceil(w / self.candle_width))
        end = int(_clamp(start + count, start, self.candle_count))
        return start, end

    def snapshot(self) -> Tuple[float, float]:
        return self.candle_width, self.start_offset

    def __repr__(self) -> str:
        return (
            f"ViewportState(candle_width={self.candle_width!r}, start_offset={self.start_offset!r}, "
            f"width={self.width!r}, candle_count={self.candle_count})"
        )
