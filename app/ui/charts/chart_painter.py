import math
from typing import Dict, List, Optional, Tuple

import pyqtgraph as pg
from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QFontMetricsF, QPainter

from chartcore.frame_params import FrameParams
from chartcore.formatting import OverlayInfoGetter, PriceLabelGetter, TimeLabelGetter
from chartcore.mapping import candle_at, index_to_center_x, price_to_y, volume_to_y, x_to_index

PRICE_GRID_LINES = 4
TIME_LABEL_SPACING_PX = 90.0


class ChartPainter:
    """
    Draws one resolved frame. Layout is fully decided by FrameParams; this class
    only turns mapped coordinates into QPainter calls.
    """

    def __init__(
        self,
        time_label: TimeLabelGetter,
        price_label: PriceLabelGetter,
        overlay_info: OverlayInfoGetter,
    ) -> None:
        self.time_label = time_label
        self.price_label = price_label
        self.overlay_info = overlay_info
        self._pen_cache: Dict[Tuple[str, float], object] = {}
        self._brush_cache: Dict[str, object] = {}

    def _get_pen(self, color: str, width: float = 1.0):
        key = (color, float(width))
        pen = self._pen_cache.get(key)
        if pen is None:
            pen = pg.mkPen(pg.mkColor(color), width=width)
            pen.setCapStyle(Qt.PenCapStyle.FlatCap)
            self._pen_cache[key] = pen
        return pen

    def _get_brush(self, color: str):
        brush = self._brush_cache.get(color)
        if brush is None:
            brush = pg.mkBrush(pg.mkColor(color))
            self._brush_cache[color] = brush
        return brush

    def paint(self, painter: QPainter, params: FrameParams) -> None:
        style = params.style
        painter.fillRect(QRectF(0, 0, params.width, params.height), pg.mkColor(style.background_color))
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self._draw_time_labels(painter, params)
        self._draw_price_grid(painter, params)
        painter.save()
        painter.setClipRect(QRectF(0, 0, params.chart_width, params.chart_height))
        for i, _ in enumerate(params.candles):
            self._draw_candle(painter, params, i)
        self._draw_trend_lines(painter, params)
        if params.pointer_position is not None:
            self._draw_selection(painter, params)
        painter.restore()
        if params.pointer_position is not None:
            self._draw_overlay(painter, params)

    def _draw_time_labels(self, painter: QPainter, params: FrameParams) -> None:
        style = params.style
        font = QFont()
        font.setPixelSize(max(1, int(style.time_label_font_size)))
        painter.setFont(font)
        painter.setPen(self._get_pen(style.time_label_color))
        visible_count = int(math.ceil(params.chart_width / params.candle_width))
        step = max(1, int(math.ceil(TIME_LABEL_SPACING_PX / params.candle_width)))
        metrics = QFontMetricsF(font)
        top = params.chart_height
        for i, candle in enumerate(params.candles):
            if (params.start_index + i) % step != 0:
                continue
            x = index_to_center_x(params, i)
            if x < 0 or x > params.chart_width:
                continue
            text = self.time_label(candle.timestamp, visible_count)
            text_w = metrics.horizontalAdvance(text)
            rect = QRectF(x - text_w / 2.0, top, text_w, style.time_label_height)
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)

    def _draw_price_grid(self, painter: QPainter, params: FrameParams) -> None:
        style = params.style
        font = QFont()
        font.setPixelSize(max(1, int(style.price_label_font_size)))
        painter.setFont(font)
        metrics = QFontMetricsF(font)
        grid_pen = self._get_pen(style.price_grid_line_color, 0.5)
        label_pen = self._get_pen(style.price_label_color)
        gap = params.price_height / PRICE_GRID_LINES
        span = params.max_price - params.min_price
        for i in range(PRICE_GRID_LINES):
            y = gap * i
            painter.setPen(grid_pen)
            painter.drawLine(QPointF(0, y), QPointF(params.chart_width, y))
            if span == 0:
                price = params.max_price
            else:
                price = params.max_price - span * (y / params.price_height)
            painter.setPen(label_pen)
            rect = QRectF(params.chart_width + 4, y, style.price_label_width - 4, metrics.height())
            painter.drawText(rect, Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, self.price_label(price))

    def _draw_candle(self, painter: QPainter, params: FrameParams, i: int) -> None:
        style = params.style
        candle = params.candles[i]
        x = index_to_center_x(params, i)
        thick = max(params.candle_width * 0.8, 0.8)
        thin = max(params.candle_width * 0.2, 0.2)
        open_, close = candle.open, candle.close

        if candle.volume is not None:
            vol_top = volume_to_y(params, candle.volume)
            vol_bottom = params.price_height + params.volume_height
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(self._get_brush(style.volume_color))
            painter.drawRect(QRectF(x - thick / 2.0, vol_top, thick, vol_bottom - vol_top))

        if open_ is None or close is None:
            return
        color = style.price_gain_color if close >= open_ else style.price_loss_color
        if candle.high is not None and candle.low is not None:
            painter.setPen(self._get_pen(color, thin))
            painter.drawLine(
                QPointF(x, price_to_y(params, candle.high)),
                QPointF(x, price_to_y(params, candle.low)),
            )
        y_open = price_to_y(params, open_)
        y_close = price_to_y(params, close)
        top = min(y_open, y_close)
        height = max(abs(y_open - y_close), 1.0)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self._get_brush(color))
        painter.drawRect(QRectF(x - thick / 2.0, top, thick, height))

    def _draw_trend_lines(self, painter: QPainter, params: FrameParams) -> None:
        candles = params.candles
        line_count = max((len(c.trends) for c in candles), default=0)
        for j in range(line_count):
            trend = params.style.trend_style(j)
            painter.setPen(self._get_pen(trend.color, trend.width))
            points: List[Optional[Tuple[float, float]]] = []
            leading = _trend_value(params.leading_trends, j)
            points.append(self._trend_point(params, -1, leading))
            for i, candle in enumerate(candles):
                points.append(self._trend_point(params, i, _trend_value(candle.trends, j)))
            trailing = _trend_value(params.trailing_trends, j)
            points.append(self._trend_point(params, len(candles), trailing))
            for a, b in zip(points, points[1:]):
                if a is None or b is None:
                    continue
                painter.drawLine(QPointF(*a), QPointF(*b))

    @staticmethod
    def _trend_point(params: FrameParams, index: int, value: Optional[float]) -> Optional[Tuple[float, float]]:
        if value is None:
            return None
        return index_to_center_x(params, index), price_to_y(params, value)

    def _draw_selection(self, painter: QPainter, params: FrameParams) -> None:
        px, _ = params.pointer_position
        index = x_to_index(params, px)
        if not (0 <= index < len(params.candles)):
            return
        x = index_to_center_x(params, index)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self._get_brush(params.style.selection_highlight_color))
        painter.drawRect(
            QRectF(x - params.candle_width / 2.0, 0, params.candle_width, params.chart_height)
        )

    def _draw_overlay(self, painter: QPainter, params: FrameParams) -> None:
        px, py = params.pointer_position
        candle = candle_at(params, px)
        if candle is None:
            return
        info = self.overlay_info(candle)
        if not info:
            return
        style = params.style
        font = QFont()
        font.setPixelSize(max(1, int(style.overlay_font_size)))
        painter.setFont(font)
        metrics = QFontMetricsF(font)
        keys = list(info.keys())
        values = [info[k] for k in keys]
        key_w = max(metrics.horizontalAdvance(k) for k in keys)
        val_w = max(metrics.horizontalAdvance(v) for v in values)
        line_h = metrics.height()
        padding = 8.0
        box_w = key_w + val_w + padding * 3
        box_h = line_h * len(keys) + padding * 2
        # Keep the box on the opposite half of the pointer so it does not hide the candle.
        left = px + 16 if px < params.chart_width / 2.0 else px - 16 - box_w
        top = py - box_h / 2.0
        left = max(0.0, min(left, params.width - box_w))
        top = max(0.0, min(top, params.chart_height - box_h))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self._get_brush(style.overlay_background_color))
        painter.drawRoundedRect(QRectF(left, top, box_w, box_h), 8.0, 8.0)
        painter.setPen(QColor(pg.mkColor(style.overlay_text_color)))
        for row, (key, value) in enumerate(zip(keys, values)):
            y = top + padding + row * line_h
            painter.drawText(QRectF(left + padding, y, key_w, line_h), Qt.AlignmentFlag.AlignLeft, key)
            painter.drawText(
                QRectF(left + padding * 2 + key_w, y, val_w, line_h), Qt.AlignmentFlag.AlignRight, value
            )


def _trend_value(trends, index: int) -> Optional[float]:
    if trends is None or index >= len(trends):
        return None
    return trends[index]
