from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .candle_data import CandlePoint, CandleSeries
from .style import ChartStyle
from .viewport import ViewportState


@dataclass(frozen=True)
class FrameParams:
    """
    Everything one paint pass needs: the visible candles and the constants that
    map them to pixels. Built fresh per frame and never mutated.
    """

    candles: List[CandlePoint]
    start_index: int
    width: float
    height: float
    candle_width: float
    start_offset: float
    max_price: float
    min_price: float
    max_vol: float
    min_vol: float
    x_shift: float
    style: ChartStyle = field(default_factory=ChartStyle)
    pointer_position: Optional[Tuple[float, float]] = None
    leading_trends: Optional[Tuple[Optional[float], ...]] = None
    trailing_trends: Optional[Tuple[Optional[float], ...]] = None

    @property
    def chart_width(self) -> float:
        return self.width - self.style.price_label_width

    @property
    def chart_height(self) -> float:
        return self.height - self.style.time_label_height

    @property
    def volume_height(self) -> float:
        return self.chart_height * self.style.volume_height_factor

    @property
    def price_height(self) -> float:
        return self.chart_height - self.volume_height

    def needs_repaint(self, other: Optional["FrameParams"]) -> bool:
        if other is None:
            return True
        if len(self.candles) != len(other.candles) or self.start_index != other.start_index:
            return True
        if (self.width, self.height, self.candle_width, self.start_offset, self.x_shift) != (
            other.width,
            other.height,
            other.candle_width,
            other.start_offset,
            other.x_shift,
        ):
            return True
        if (self.max_price, self.min_price, self.max_vol, self.min_vol) != (
            other.max_price,
            other.min_price,
            other.max_vol,
            other.min_vol,
        ):
            return True
        if self.pointer_position != other.pointer_position:
            return True
        if self.leading_trends != other.leading_trends or self.trailing_trends != other.trailing_trends:
            return True
        return self.style != other.style


def build_frame_params(
    series: CandleSeries,
    viewport: ViewportState,
    width: float,
    height: float,
    style: Optional[ChartStyle] = None,
    pointer_position: Optional[Tuple[float, float]] = None,
) -> FrameParams:
    style = style or ChartStyle()
    w = width - style.price_label_width
    start, end = viewport.visible_range(w)
    candle_width = viewport.candle_width
    start_offset = viewport.start_offset

    # One lookahead candle keeps the right edge filled while scrolling by fractions.
    slice_end = end + 1 if end < len(series) else end
    candles = series[start:slice_end]

    # Half a candle centers the bodies; the fraction covers the partly scrolled-off candle.
    half_candle = candle_width / 2.0
    fraction_candle = start_offset - start * candle_width
    x_shift = half_candle - fraction_candle

    max_price, min_price = series.price_extrema(start, slice_end)
    max_vol, min_vol = series.volume_extrema(start, slice_end)

    leading = series.at(start - 1)
    trailing = series.at(end + 1)

    return FrameParams(
        candles=candles,
        start_index=start,
        width=width,
        height=height,
        candle_width=candle_width,
        start_offset=start_offset,
        max_price=max_price,
        min_price=min_price,
        max_vol=max_vol,
        min_vol=min_vol,
        x_shift=x_shift,
        style=style,
        pointer_position=pointer_position,
        leading_trends=leading.trends if leading is not None else None,
        trailing_trends=trailing.trends if trailing is not None else None,
    )
