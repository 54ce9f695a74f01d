from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field
import math
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union, overload

import numpy as np


def _opt_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(out):
        return None
    return out


@dataclass(eq=False)
class CandlePoint:
    timestamp: int
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[float] = None
    # Auxiliary per-candle lines (e.g. [ma7, ma30]). Replaced wholesale, never edited in place.
    trends: Tuple[Optional[float], ...] = field(default_factory=tuple)

    def __setattr__(self, name, value) -> None:
        if name == "trends":
            value = () if value is None else tuple(_opt_float(v) for v in value)
        elif "trends" in self.__dict__:
            # Prices are cached by CandleSeries; only trends may change once built.
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        super().__setattr__(name, value)

    @property
    def derived_high(self) -> Optional[float]:
        if self.high is not None:
            return self.high
        if self.open is not None and self.close is not None:
            return max(self.open, self.close)
        return self.open if self.open is not None else self.close

    @property
    def derived_low(self) -> Optional[float]:
        if self.low is not None:
            return self.low
        if self.open is not None and self.close is not None:
            return min(self.open, self.close)
        return self.open if self.open is not None else self.close

    def __str__(self) -> str:
        return f"<CandlePoint ({self.timestamp}: {self.close})>"


class CandleSeries(Sequence[CandlePoint]):
    """
    Ordered, fixed-length collection of candles handed to the chart.

    Prices are read once at construction into float arrays (NaN = absent) so the
    per-frame extrema are a slice + nanmax. Only the points' `trends` may change
    afterwards.
    """

    MIN_LENGTH = 3

    def __init__(self, points: Iterable[CandlePoint]) -> None:
        self._points: List[CandlePoint] = list(points)
        if len(self._points) < self.MIN_LENGTH:
            raise ValueError(
                f"CandleSeries requires {self.MIN_LENGTH} or more candles, got {len(self._points)}"
            )
        count = len(self._points)
        self._highs = np.full(count, np.nan, dtype=np.float64)
        self._lows = np.full(count, np.nan, dtype=np.float64)
        self._volumes = np.full(count, np.nan, dtype=np.float64)
        for idx, point in enumerate(self._points):
            hi = point.derived_high
            lo = point.derived_low
            if hi is not None:
                self._highs[idx] = hi
            if lo is not None:
                self._lows[idx] = lo
            if point.volume is not None:
                self._volumes[idx] = point.volume

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Union[float, int, None]]]) -> "CandleSeries":
        points = []
        for row in rows:
            values = list(row) + [None] * max(0, 6 - len(row))
            points.append(
                CandlePoint(
                    timestamp=int(values[0]),
                    open=_opt_float(values[1]),
                    high=_opt_float(values[2]),
                    low=_opt_float(values[3]),
                    close=_opt_float(values[4]),
                    volume=_opt_float(values[5]),
                )
            )
        return cls(points)

    @overload
    def __getitem__(self, index: int) -> CandlePoint: ...

    @overload
    def __getitem__(self, index: slice) -> List[CandlePoint]: ...

    def __getitem__(self, index):
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[CandlePoint]:
        return iter(self._points)

    def at(self, index: int) -> Optional[CandlePoint]:
        if 0 <= index < len(self._points):
            return self._points[index]
        return None

    def price_extrema(self, start: int, end: int) -> Tuple[float, float]:
        highs = self._highs[start:end]
        lows = self._lows[start:end]
        mask_hi = np.isfinite(highs)
        mask_lo = np.isfinite(lows)
        if not np.any(mask_hi) or not np.any(mask_lo):
            raise ValueError(f"no plottable prices in candles [{start}:{end}]")
        return float(np.max(highs[mask_hi])), float(np.min(lows[mask_lo]))

    def volume_extrema(self, start: int, end: int) -> Tuple[float, float]:
        vols = self._volumes[start:end]
        mask = np.isfinite(vols)
        if not np.any(mask):
            return float("-inf"), float("inf")
        return float(np.max(vols[mask])), float(np.min(vols[mask]))

    def set_trends(self, rows: Sequence[Sequence[Optional[float]]]) -> None:
        if len(rows) != len(self._points):
            raise ValueError(f"expected {len(self._points)} trend rows, got {len(rows)}")
        for point, row in zip(self._points, rows):
            point.trends = row

    def clear_trends(self) -> None:
        for point in self._points:
            point.trends = ()


def compute_ma(series: Sequence[CandlePoint], period: int = 7) -> List[Optional[float]]:
    if period <= 0:
        raise ValueError("period must be positive")
    count = len(series)
    if count < period * 2:
        return [None] * count
    closes = np.array(
        [p.close if p.close is not None else np.nan for p in series], dtype=np.float64
    )
    seed = closes[:period]
    seed = seed[np.isfinite(seed)]
    if seed.size == 0:
        return [None] * count
    ma = float(np.mean(seed))
    result: List[Optional[float]] = [None] * period
    for i in range(period, count):
        curr = closes[i]
        prev = closes[i - period]
        if np.isfinite(curr) and np.isfinite(prev):
            ma = (ma * period + curr - prev) / period
            result.append(float(ma))
        else:
            result.append(None)
    return result
