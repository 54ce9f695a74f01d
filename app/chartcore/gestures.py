from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .viewport import ViewportState


class GesturePhase(Enum):
    START = "start"
    UPDATE = "update"
    END = "end"


@dataclass(frozen=True)
class GestureEvent:
    """Toolkit-neutral pan/zoom input; `scale` is cumulative since START (1.0 = no zoom)."""

    phase: GesturePhase
    focal_x: float = 0.0
    scale: float = 1.0


@dataclass(frozen=True)
class _TrackingSnapshot:
    candle_width: float
    start_offset: float
    focal_x: float


class GestureController:
    """
    Idle/Tracking state machine that turns pan and zoom input into viewport changes.

    Every update is recomputed from the snapshot taken at gesture start, never from
    the previous update, so long gestures do not accumulate rounding drift.
    """

    def __init__(
        self,
        viewport: ViewportState,
        on_candle_resize: Optional[Callable[[float], None]] = None,
        zoom_in_factor: float = 1.1,
        zoom_out_factor: float = 0.9,
    ) -> None:
        self.viewport = viewport
        self.on_candle_resize = on_candle_resize
        self.zoom_in_factor = zoom_in_factor
        self.zoom_out_factor = zoom_out_factor
        self._tracking: Optional[_TrackingSnapshot] = None

    @property
    def is_tracking(self) -> bool:
        return self._tracking is not None

    def handle(self, event: GestureEvent) -> None:
        if event.phase is GesturePhase.START:
            self.start(event.focal_x)
        elif event.phase is GesturePhase.UPDATE:
            self.update(event.scale, event.focal_x)
        else:
            self.end()

    def start(self, focal_x: float) -> None:
        vp = self.viewport
        if not vp.is_initialized:
            raise RuntimeError("gesture started before the viewport was laid out")
        self._tracking = _TrackingSnapshot(vp.candle_width, vp.start_offset, float(focal_x))

    def update(self, scale: float, focal_x: float) -> None:
        snap = self._tracking
        if snap is None:
            raise RuntimeError("gesture update received while idle")
        vp = self.viewport
        w = vp.width
        candle_width = vp.clamp_candle_width(snap.candle_width * scale, w)
        # Re-derived after clamping so the offset follows the zoom actually applied.
        effective_scale = candle_width / snap.candle_width
        start_offset = snap.start_offset * effective_scale

        # Dragging right moves the focal point right and reveals older candles.
        start_offset += snap.focal_x - focal_x

        # Keep the candle under the focal point stationary while zooming.
        prev_count = w / snap.candle_width
        curr_count = w / candle_width
        zoom_adjustment = (curr_count - prev_count) * candle_width
        start_offset -= zoom_adjustment * (focal_x / w)

        start_offset = vp.clamp_start_offset(start_offset, w, candle_width)

        changed = candle_width != vp.candle_width
        vp.candle_width = candle_width
        vp.start_offset = start_offset
        if changed and self.on_candle_resize is not None:
            self.on_candle_resize(candle_width)

    def end(self) -> None:
        self._tracking = None

    def scroll(self, delta_y: float, focal_x: float) -> bool:
        """Single-tick zoom for wheel/trackpad scrolling; positive delta zooms out."""
        if delta_y == 0:
            return False
        self.start(focal_x)
        try:
            self.update(self.zoom_out_factor if delta_y > 0 else self.zoom_in_factor, focal_x)
        finally:
            self.end()
        return True
