import time
import traceback
from typing import Callable, Optional, Tuple

from PyQt6.QtCore import QEvent, QEasingCurve, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from chartcore.candle_data import CandlePoint, CandleSeries
from chartcore.config import ChartConfig
from chartcore.formatting import (
    OverlayInfoGetter,
    PriceLabelGetter,
    TimeLabelGetter,
    default_overlay_info,
    default_price_label,
    default_time_label,
)
from chartcore.frame_params import FrameParams, build_frame_params
from chartcore.gestures import GestureController
from chartcore.mapping import candle_at
from chartcore.style import ChartStyle
from chartcore.transition import FrameTransition
from chartcore.viewport import ViewportState

from .chart_painter import ChartPainter


class InteractiveChart(QWidget):
    """
    Pan/zoom candlestick widget.

    Qt input is normalized at this boundary: left-drag pans, the wheel zooms one
    tick at the cursor, trackpad pinch zooms continuously, and a press without
    movement selects a candle (overlay while held, `candle_tapped` on release).
    """

    candle_tapped = pyqtSignal(object)
    candle_resized = pyqtSignal(float)

    def __init__(
        self,
        series: CandleSeries,
        style: Optional[ChartStyle] = None,
        config: Optional[ChartConfig] = None,
        time_label: Optional[TimeLabelGetter] = None,
        price_label: Optional[PriceLabelGetter] = None,
        overlay_info: Optional[OverlayInfoGetter] = None,
        on_tap: Optional[Callable[[CandlePoint], None]] = None,
        on_candle_resize: Optional[Callable[[float], None]] = None,
        error_sink=None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.series = series
        self.chart_style = style or ChartStyle()
        self.config = config or ChartConfig()
        self.on_tap = on_tap
        self.on_candle_resize = on_candle_resize
        self.error_sink = error_sink

        self.viewport = ViewportState(len(series), self.config.min_visible_count)
        self.controller = GestureController(
            self.viewport,
            on_candle_resize=self._on_candle_resize,
            zoom_in_factor=self.config.zoom_in_factor,
            zoom_out_factor=self.config.zoom_out_factor,
        )
        easing = QEasingCurve(QEasingCurve.Type.OutCubic)
        self.transition = FrameTransition(self.config.transition_ms / 1000.0, easing=easing.valueForProgress)
        self.painter = ChartPainter(
            time_label=self._guarded(time_label, default_time_label, "time label"),
            price_label=self._guarded(price_label, default_price_label, "price label"),
            overlay_info=self._guarded(overlay_info, default_overlay_info, "overlay info"),
        )

        self._pointer: Optional[Tuple[float, float]] = None
        self._press_x: Optional[float] = None
        self._press_y: Optional[float] = None
        self._dragging = False
        self._pinch_scale = 1.0
        self._displayed: Optional[FrameParams] = None

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(self.config.frame_interval_ms)
        self._frame_timer.timeout.connect(self._on_frame_tick)

        self.setMouseTracking(False)
        self.setMinimumSize(
            int(self.chart_style.price_label_width) + 60, int(self.chart_style.time_label_height) + 60
        )
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)

    @property
    def chart_width(self) -> float:
        return float(self.width()) - self.chart_style.price_label_width

    @property
    def displayed_params(self) -> Optional[FrameParams]:
        return self._displayed

    def set_style(self, style: ChartStyle) -> None:
        self.chart_style = style
        self._layout_viewport()
        self.refresh()

    def refresh(self, force: bool = False) -> None:
        """Rebuild the target frame; pass `force` after replacing candle trends in place."""
        if not self.viewport.is_initialized:
            return
        params = build_frame_params(
            self.series,
            self.viewport,
            float(self.width()),
            float(self.height()),
            self.chart_style,
            self._pointer,
        )
        if not force and not params.needs_repaint(self.transition.target):
            return
        self.transition.retarget(params, time.monotonic())
        if not self._frame_timer.isActive():
            self._frame_timer.start()
        self.update()

    def _layout_viewport(self) -> bool:
        w = self.chart_width
        if w <= 0:
            return False
        return self.viewport.layout(w, self.config.initial_visible_count)

    def _on_frame_tick(self) -> None:
        if not self.transition.is_running(time.monotonic()):
            self._frame_timer.stop()
        self.update()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._layout_viewport()
        self.refresh()

    def paintEvent(self, event) -> None:
        params = self.transition.sample(time.monotonic())
        if params is None:
            return
        self._displayed = params
        painter = QPainter(self)
        try:
            self.painter.paint(painter, params)
        finally:
            painter.end()

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.MouseButton.LeftButton or not self.viewport.is_initialized:
            event.ignore()
            return
        pos = event.position()
        self._press_x = pos.x()
        self._press_y = pos.y()
        self._dragging = False
        self._pointer = (pos.x(), pos.y())
        self.controller.start(pos.x())
        self.refresh()
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        if not self.controller.is_tracking or self._press_x is None:
            event.ignore()
            return
        pos = event.position()
        if not self._dragging:
            dx = pos.x() - self._press_x
            dy = pos.y() - (self._press_y or 0.0)
            if (dx * dx + dy * dy) ** 0.5 <= self.config.tap_slop_px:
                event.accept()
                return
            # Movement past the slop turns the press into a pan and cancels the tap.
            self._dragging = True
            self._pointer = None
        self.controller.update(1.0, pos.x())
        self.refresh()
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if event.button() != Qt.MouseButton.LeftButton or not self.controller.is_tracking:
            event.ignore()
            return
        if not self._dragging and self._pointer is not None:
            self._fire_tap(self._pointer[0])
        self.controller.end()
        self._pointer = None
        self._press_x = None
        self._press_y = None
        self._dragging = False
        self.refresh()
        event.accept()

    def wheelEvent(self, event) -> None:
        if not self.viewport.is_initialized or self.controller.is_tracking:
            event.ignore()
            return
        delta = event.angleDelta().y()
        if delta == 0:
            delta = event.pixelDelta().y()
        # Qt reports wheel-up as positive; a positive scroll delta means zoom out.
        if self.controller.scroll(-delta, event.position().x()):
            self.refresh()
        event.accept()

    def event(self, event) -> bool:
        if event.type() == QEvent.Type.NativeGesture and self.viewport.is_initialized:
            return self._handle_native_gesture(event)
        return super().event(event)

    def _handle_native_gesture(self, event) -> bool:
        kind = event.gestureType()
        x = event.position().x()
        if kind == Qt.NativeGestureType.BeginNativeGesture:
            if not self.controller.is_tracking:
                self._pinch_scale = 1.0
                self.controller.start(x)
        elif kind == Qt.NativeGestureType.ZoomNativeGesture:
            if not self.controller.is_tracking:
                self._pinch_scale = 1.0
                self.controller.start(x)
            self._pinch_scale *= 1.0 + event.value()
            self.controller.update(self._pinch_scale, x)
            self.refresh()
        elif kind == Qt.NativeGestureType.EndNativeGesture:
            # A pinch during a held mouse press leaves the press in charge.
            if self._press_x is None:
                self.controller.end()
            self._pinch_scale = 1.0
        event.accept()
        return True

    def _fire_tap(self, x: float) -> None:
        params = self._displayed or self.transition.target
        if params is None:
            return
        candle = candle_at(params, x)
        if candle is None:
            return
        self.candle_tapped.emit(candle)
        if self.on_tap is not None:
            try:
                self.on_tap(candle)
            except Exception:
                self._report_error(f"on_tap failed:\n{traceback.format_exc()}")

    def _on_candle_resize(self, candle_width: float) -> None:
        self.candle_resized.emit(candle_width)
        if self.on_candle_resize is not None:
            try:
                self.on_candle_resize(candle_width)
            except Exception:
                self._report_error(f"on_candle_resize failed:\n{traceback.format_exc()}")

    def _guarded(self, getter, fallback, what: str):
        if getter is None:
            return fallback

        def _call(*args):
            try:
                return getter(*args)
            except Exception as exc:
                self._report_error(f"{what} callback failed: {exc}")
                return fallback(*args)

        return _call

    def _report_error(self, message: str) -> None:
        if self.error_sink is not None:
            try:
                self.error_sink.append_error(message)
            except Exception:
                pass
