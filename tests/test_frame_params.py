import os
import sys
import unittest

# Allow `import chartcore.*` like the app does when running `python app/main.py`.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
APP_DIR = os.path.join(REPO_ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from chart_fixtures import BASE_TS, DAY_MS, make_series
from chartcore.candle_data import CandlePoint, CandleSeries
from chartcore.frame_params import build_frame_params
from chartcore.mapping import (
    VOLUME_BASE_HEIGHT,
    VOLUME_TOP_GAP,
    candle_at,
    index_to_center_x,
    price_to_y,
    volume_to_y,
    x_to_index,
)
from chartcore.style import ChartStyle
from chartcore.viewport import ViewportState

STYLE = ChartStyle()
# 900px of candles next to the 48px price labels; 400px of chart above the 24px time labels.
WIDTH = 948.0
HEIGHT = 424.0


def _frame(series, start_offset=None, pointer=None, initial=90):
    vp = ViewportState(len(series))
    vp.initialize(WIDTH - STYLE.price_label_width, initial)
    if start_offset is not None:
        vp.start_offset = start_offset
    return build_frame_params(series, vp, WIDTH, HEIGHT, STYLE, pointer)


class FrameParamsTests(unittest.TestCase):
    def test_band_heights(self):
        params = _frame(make_series(200))
        self.assertEqual(params.chart_width, 900.0)
        self.assertEqual(params.chart_height, 400.0)
        self.assertAlmostEqual(params.volume_height, 80.0)
        self.assertAlmostEqual(params.price_height, 320.0)

    def test_right_aligned_slice_has_no_lookahead(self):
        series = make_series(200)
        params = _frame(series)
        self.assertEqual(params.start_index, 110)
        self.assertEqual(len(params.candles), 90)
        self.assertIs(params.candles[-1], series[199])
        self.assertEqual(params.x_shift, 5.0)
        self.assertIsNone(params.trailing_trends)
        self.assertEqual(params.leading_trends, series[109].trends)

    def test_fractional_scroll_adds_lookahead_and_shifts(self):
        series = make_series(200)
        params = _frame(series, start_offset=503.0)
        self.assertEqual(params.start_index, 50)
        # 90 visible plus the partially scrolled-in candle at the right edge.
        self.assertEqual(len(params.candles), 91)
        self.assertIs(params.candles[0], series[50])
        self.assertIs(params.candles[-1], series[140])
        self.assertAlmostEqual(params.x_shift, 2.0)
        self.assertEqual(params.leading_trends, series[49].trends)
        self.assertEqual(params.trailing_trends, series[141].trends)

    def test_leading_trends_absent_at_series_start(self):
        params = _frame(make_series(200), start_offset=0.0)
        self.assertIsNone(params.leading_trends)

    def test_extrema_cover_lookahead(self):
        series = make_series(200)
        params = _frame(series, start_offset=503.0)
        highs = [c.high for c in series[50:141]]
        lows = [c.low for c in series[50:141]]
        self.assertEqual(params.max_price, max(highs))
        self.assertEqual(params.min_price, min(lows))
        self.assertEqual((params.max_vol, params.min_vol), (100.0, 100.0))

    def test_open_close_fallback_when_wicks_missing(self):
        point = CandlePoint(timestamp=BASE_TS, open=10.0, close=12.0, high=None, low=None)
        self.assertEqual(point.derived_high, 12.0)
        self.assertEqual(point.derived_low, 10.0)
        only_close = CandlePoint(timestamp=BASE_TS, close=7.0)
        self.assertEqual((only_close.derived_high, only_close.derived_low), (7.0, 7.0))

        series = CandleSeries(
            [
                point,
                CandlePoint(timestamp=BASE_TS + DAY_MS, open=11.0, close=11.5),
                CandlePoint(timestamp=BASE_TS + 2 * DAY_MS, open=11.0, close=None, volume=3.0),
            ]
        )
        params = _frame(series)
        self.assertEqual(params.max_price, 12.0)
        self.assertEqual(params.min_price, 10.0)
        self.assertEqual((params.max_vol, params.min_vol), (3.0, 3.0))

    def test_flat_volume_maps_to_mid_band(self):
        params = _frame(make_series(200, volume=500.0))
        mid = params.price_height + params.volume_height / 2.0
        for candle in params.candles:
            self.assertEqual(volume_to_y(params, candle.volume), mid)

    def test_missing_volume_uses_sentinels_and_mid_band(self):
        params = _frame(make_series(50, volume=None))
        self.assertEqual(params.max_vol, float("-inf"))
        self.assertEqual(params.min_vol, float("inf"))
        self.assertEqual(volume_to_y(params, 1.0), params.price_height + params.volume_height / 2.0)

    def test_volume_scale_reserves_gap_and_base(self):
        series = CandleSeries(
            [
                CandlePoint(timestamp=BASE_TS + i * DAY_MS, open=1.0, close=2.0, volume=v)
                for i, v in enumerate((100.0, 300.0, 200.0))
            ]
        )
        params = _frame(series)
        bottom = params.price_height + params.volume_height
        self.assertAlmostEqual(volume_to_y(params, 100.0), bottom - VOLUME_BASE_HEIGHT)
        self.assertAlmostEqual(volume_to_y(params, 300.0), params.price_height + VOLUME_TOP_GAP)
        self.assertLess(volume_to_y(params, 300.0), volume_to_y(params, 200.0))

    def test_price_mapping_is_inverted_and_linear(self):
        params = _frame(make_series(200))
        self.assertEqual(price_to_y(params, params.max_price), 0.0)
        self.assertAlmostEqual(price_to_y(params, params.min_price), params.price_height)
        mid = (params.max_price + params.min_price) / 2.0
        self.assertAlmostEqual(price_to_y(params, mid), params.price_height / 2.0)

    def test_flat_price_maps_to_mid_height(self):
        series = CandleSeries(
            [CandlePoint(timestamp=BASE_TS + i * DAY_MS, open=5.0, close=5.0) for i in range(4)]
        )
        params = _frame(series)
        self.assertEqual(params.max_price, params.min_price)
        self.assertEqual(price_to_y(params, 5.0), params.price_height / 2.0)

    def test_hit_testing_inverts_candle_placement(self):
        for offset in (1100.0, 503.0, 0.0, 777.7):
            params = _frame(make_series(200), start_offset=offset)
            cw = params.candle_width
            for i in range(len(params.candles)):
                center = index_to_center_x(params, i)
                for frac in (-0.49, -0.25, 0.0, 0.25, 0.49):
                    self.assertEqual(x_to_index(params, center + frac * cw), i)

    def test_candle_at_outside_slice(self):
        params = _frame(make_series(200))
        self.assertIsNone(candle_at(params, -100.0))
        self.assertIsNone(candle_at(params, 5000.0))
        self.assertIs(candle_at(params, index_to_center_x(params, 3)), params.candles[3])

    def test_pointer_position_and_repaint_check(self):
        series = make_series(200)
        a = _frame(series)
        b = _frame(series, pointer=(10.0, 20.0))
        self.assertEqual(b.pointer_position, (10.0, 20.0))
        self.assertTrue(b.needs_repaint(a))
        self.assertFalse(a.needs_repaint(_frame(series)))
        self.assertTrue(a.needs_repaint(None))


if __name__ == "__main__":
    unittest.main()
