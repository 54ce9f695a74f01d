from __future__ import annotations

import math
from typing import Optional

from .candle_data import CandlePoint
from .frame_params import FrameParams

# Space between the price band and the tallest volume bar.
VOLUME_TOP_GAP = 12.0
# Smallest volume bar, so the minimum volume stays visible.
VOLUME_BASE_HEIGHT = 2.0


def price_to_y(params: FrameParams, price: float) -> float:
    span = params.max_price - params.min_price
    if span == 0:
        return params.price_height / 2.0
    return params.price_height * (params.max_price - price) / span


def volume_to_y(params: FrameParams, volume: float) -> float:
    span = params.max_vol - params.min_vol
    if span == 0 or not math.isfinite(span):
        return params.price_height + params.volume_height / 2.0
    grid = (params.volume_height - VOLUME_BASE_HEIGHT - VOLUME_TOP_GAP) / span
    scaled = (volume - params.min_vol) * grid
    return params.volume_height - scaled + params.price_height - VOLUME_BASE_HEIGHT


def index_to_center_x(params: FrameParams, index: int) -> float:
    return params.x_shift + index * params.candle_width


def x_to_index(params: FrameParams, x: float) -> int:
    """Inverse of `index_to_center_x`: the slice index whose candle span contains `x`."""
    adjusted = x - params.x_shift + params.candle_width / 2.0
    return int(math.floor(adjusted / params.candle_width))


def candle_at(params: FrameParams, x: float) -> Optional[CandlePoint]:
    index = x_to_index(params, x)
    if 0 <= index < len(params.candles):
        return params.candles[index]
    return None
