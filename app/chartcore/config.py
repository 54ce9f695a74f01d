from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChartConfig:
    initial_visible_count: int = 90
    # Zoom-in stops once this many candles (or the whole series, if shorter) fill the view.
    min_visible_count: int = 14
    transition_ms: int = 100
    frame_interval_ms: int = 16
    zoom_in_factor: float = 1.1
    zoom_out_factor: float = 0.9
    tap_slop_px: float = 4.0

    def __post_init__(self) -> None:
        if self.initial_visible_count < 3:
            raise ValueError("initial_visible_count must be 3 or more")
        if self.min_visible_count < 1:
            raise ValueError("min_visible_count must be positive")
        if self.transition_ms < 0 or self.frame_interval_ms <= 0:
            raise ValueError("transition_ms must be >= 0 and frame_interval_ms > 0")
        if not (0.0 < self.zoom_out_factor < 1.0 < self.zoom_in_factor):
            raise ValueError("zoom factors must satisfy 0 < zoom_out < 1 < zoom_in")
        if self.tap_slop_px < 0:
            raise ValueError("tap_slop_px must be >= 0")
