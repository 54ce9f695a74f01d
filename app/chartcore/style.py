from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


# Colors are pyqtgraph color strings: "#RRGGBB" or "#RRGGBBAA".
@dataclass(frozen=True)
class TrendLineStyle:
    color: str = "#2196F3"
    width: float = 1.0


DEFAULT_TREND_STYLE = TrendLineStyle()


@dataclass(frozen=True)
class ChartStyle:
    volume_height_factor: float = 0.2
    price_label_width: float = 48.0
    time_label_height: float = 24.0
    time_label_font_size: int = 16
    price_label_font_size: int = 12
    overlay_font_size: int = 16
    time_label_color: str = "#9E9E9E"
    price_label_color: str = "#9E9E9E"
    overlay_text_color: str = "#FFFFFF"
    price_gain_color: str = "#4CAF50"
    price_loss_color: str = "#F44336"
    volume_color: str = "#9E9E9E"
    trend_line_styles: Tuple[TrendLineStyle, ...] = field(default_factory=tuple)
    price_grid_line_color: str = "#9E9E9E"
    selection_highlight_color: str = "#75757533"
    overlay_background_color: str = "#757575EE"
    background_color: str = "#00000000"

    def __post_init__(self) -> None:
        if not (0.0 <= self.volume_height_factor < 1.0):
            raise ValueError("volume_height_factor must be in [0, 1)")
        if self.price_label_width < 0 or self.time_label_height < 0:
            raise ValueError("label sizes must be >= 0")

    def trend_style(self, index: int) -> TrendLineStyle:
        if 0 <= index < len(self.trend_line_styles):
            return self.trend_line_styles[index]
        return DEFAULT_TREND_STYLE

    @classmethod
    def dark(cls) -> "ChartStyle":
        return cls(
            background_color="#131722",
            price_gain_color="#26A69A",
            price_loss_color="#EF5350",
            volume_color="#5D606B",
            price_grid_line_color="#2A2E39",
            trend_line_styles=(
                TrendLineStyle("#FF7043", 2.0),
                TrendLineStyle("#FFA726", 2.0),
                TrendLineStyle("#42A5F5", 2.0),
            ),
        )

    @classmethod
    def light(cls) -> "ChartStyle":
        return cls(
            background_color="#FFFFFF",
            time_label_color="#616161",
            price_label_color="#616161",
            price_grid_line_color="#E0E0E0",
            trend_line_styles=(
                TrendLineStyle("#E64A19", 2.0),
                TrendLineStyle("#F57C00", 2.0),
                TrendLineStyle("#1976D2", 2.0),
            ),
        )
