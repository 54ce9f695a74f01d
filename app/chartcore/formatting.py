from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict

from .candle_data import CandlePoint

TimeLabelGetter = Callable[[int, int], str]
PriceLabelGetter = Callable[[float], str]
OverlayInfoGetter = Callable[[CandlePoint], Dict[str, str]]

_SUFFIXES = ("K", "M", "B", "T", "Q")


def as_percent(value: float) -> str:
    body = f"{value:.2f}" if value < 100 else f"{value:,.0f}"
    sign = "+" if value >= 0 else ""
    return f"{sign}{body}%"


def as_abbreviated(value: float) -> str:
    if value < 1000:
        return f"{value:.3f}"
    if value >= 1e18:
        return f"{value:.3e}"
    groups = f"{value:,.0f}".split(",")
    return f"{groups[0]}.{groups[1]}{_SUFFIXES[len(groups) - 2]}"


def default_time_label(timestamp: int, visible_count: int) -> str:
    dt = datetime.fromtimestamp(timestamp / 1000.0)
    if visible_count > 20:
        return dt.strftime("%Y-%m")
    return dt.strftime("%m-%d")


def default_price_label(price: float) -> str:
    return f"{price:.2f}"


def _fixed(value) -> str:
    return f"{value:.2f}" if value is not None else "-"


def default_overlay_info(candle: CandlePoint) -> Dict[str, str]:
    dt = datetime.fromtimestamp(candle.timestamp / 1000.0)
    return {
        "Date": f"{dt:%b} {dt.day}, {dt.year}",
        "Open": _fixed(candle.open),
        "High": _fixed(candle.high),
        "Low": _fixed(candle.low),
        "Close": _fixed(candle.close),
        "Volume": as_abbreviated(candle.volume) if candle.volume is not None else "-",
    }
