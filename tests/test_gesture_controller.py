import os
import sys
import unittest

import numpy as np

# Allow `import chartcore.*` like the app does when running `python app/main.py`.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
APP_DIR = os.path.join(REPO_ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from chartcore.gestures import GestureController, GestureEvent, GesturePhase
from chartcore.viewport import ViewportState


def _laid_out(count: int = 200, width: float = 900.0, initial: int = 90) -> ViewportState:
    vp = ViewportState(count)
    vp.initialize(width, initial)
    return vp


def _data_position(vp: ViewportState, x: float) -> float:
    # Fractional candle index under pixel x.
    return (vp.start_offset + x) / vp.candle_width


class GestureControllerTests(unittest.TestCase):
    def assert_in_bounds(self, vp: ViewportState) -> None:
        w = vp.width
        eps = 1e-9
        self.assertGreaterEqual(vp.candle_width, vp.min_candle_width(w) - eps)
        self.assertLessEqual(vp.candle_width, vp.max_candle_width(w) + eps)
        self.assertGreaterEqual(vp.start_offset, -eps)
        self.assertLessEqual(vp.start_offset, vp.max_start_offset(w, vp.candle_width) + eps)

    def test_zoom_out_tick_at_center(self):
        vp = _laid_out()
        resized = []
        ctl = GestureController(vp, on_candle_resize=resized.append)
        self.assertTrue(ctl.scroll(120, 450.0))
        self.assertAlmostEqual(vp.candle_width, 9.0)
        # 990 after scaling, 945 after focal correction, clamped to the right edge.
        self.assertAlmostEqual(vp.start_offset, 900.0)
        self.assertAlmostEqual(vp.start_offset, vp.max_start_offset(900.0, 9.0))
        self.assertEqual(len(resized), 1)
        self.assertAlmostEqual(resized[0], 9.0)
        self.assertFalse(ctl.is_tracking)
        self.assert_in_bounds(vp)

    def test_zoom_out_tick_unclamped_offset(self):
        vp = _laid_out()
        vp.start_offset = 500.0
        ctl = GestureController(vp)
        ctl.scroll(1, 450.0)
        # 500 * 0.9 = 450, minus (100 - 90) * 9 * 0.5 = 45.
        self.assertAlmostEqual(vp.start_offset, 405.0)

    def test_zoom_in_tick(self):
        vp = _laid_out()
        vp.start_offset = 500.0
        ctl = GestureController(vp)
        ctl.scroll(-1, 450.0)
        self.assertAlmostEqual(vp.candle_width, 11.0)
        self.assert_in_bounds(vp)

    def test_zero_scroll_is_ignored(self):
        vp = _laid_out()
        ctl = GestureController(vp)
        self.assertFalse(ctl.scroll(0, 100.0))
        self.assertEqual(vp.snapshot(), (10.0, 1100.0))

    def test_focal_point_stays_put_while_zooming(self):
        focal = 450.0
        for scale in (0.5, 0.75, 1.0, 1.25, 2.0):
            vp = _laid_out()
            vp.start_offset = 500.0
            before = _data_position(vp, focal)
            ctl = GestureController(vp)
            ctl.start(focal)
            ctl.update(scale, focal)
            ctl.end()
            self.assertAlmostEqual(_data_position(vp, focal), before, places=9, msg=f"scale={scale}")

    def test_drag_right_reveals_older_candles(self):
        vp = _laid_out()
        vp.start_offset = 500.0
        ctl = GestureController(vp)
        ctl.start(400.0)
        ctl.update(1.0, 450.0)
        self.assertAlmostEqual(vp.start_offset, 450.0)
        ctl.update(1.0, 350.0)
        self.assertAlmostEqual(vp.start_offset, 550.0)
        ctl.end()

    def test_pan_is_clamped_at_both_ends(self):
        vp = _laid_out()
        ctl = GestureController(vp)
        ctl.start(100.0)
        ctl.update(1.0, 0.0)
        self.assertEqual(vp.start_offset, 1100.0)
        ctl.update(1.0, 5000.0)
        self.assertEqual(vp.start_offset, 0.0)
        ctl.end()

    def test_updates_are_relative_to_gesture_start(self):
        vp_a = _laid_out()
        vp_a.start_offset = 500.0
        ctl_a = GestureController(vp_a)
        ctl_a.start(300.0)
        ctl_a.update(0.8, 320.0)
        ctl_a.update(1.3, 310.0)
        ctl_a.end()

        vp_b = _laid_out()
        vp_b.start_offset = 500.0
        ctl_b = GestureController(vp_b)
        ctl_b.start(300.0)
        ctl_b.update(1.3, 310.0)
        ctl_b.end()
        self.assertEqual(vp_a.snapshot(), vp_b.snapshot())

    def test_zoom_clamped_to_limits_reports_only_changes(self):
        vp = _laid_out()
        resized = []
        ctl = GestureController(vp, on_candle_resize=resized.append)
        ctl.start(450.0)
        ctl.update(100.0, 450.0)
        self.assertAlmostEqual(vp.candle_width, 900.0 / 14)
        ctl.update(200.0, 450.0)
        ctl.update(1.0, 460.0)
        ctl.end()
        self.assertEqual(len(resized), 2)
        self.assertAlmostEqual(resized[-1], 10.0)

        ctl.start(450.0)
        ctl.update(0.001, 450.0)
        ctl.end()
        self.assertAlmostEqual(vp.candle_width, 4.5)
        self.assertEqual(vp.start_offset, 0.0)
        self.assert_in_bounds(vp)

    def test_pan_only_does_not_notify_resize(self):
        vp = _laid_out()
        resized = []
        ctl = GestureController(vp, on_candle_resize=resized.append)
        ctl.start(300.0)
        ctl.update(1.0, 350.0)
        ctl.end()
        self.assertEqual(resized, [])

    def test_normalized_events(self):
        vp = _laid_out()
        vp.start_offset = 500.0
        ctl = GestureController(vp)
        ctl.handle(GestureEvent(GesturePhase.START, focal_x=400.0))
        self.assertTrue(ctl.is_tracking)
        ctl.handle(GestureEvent(GesturePhase.UPDATE, focal_x=420.0, scale=1.0))
        self.assertAlmostEqual(vp.start_offset, 480.0)
        ctl.handle(GestureEvent(GesturePhase.END))
        self.assertFalse(ctl.is_tracking)

    def test_update_while_idle_is_a_contract_violation(self):
        ctl = GestureController(_laid_out())
        with self.assertRaises(RuntimeError):
            ctl.update(1.0, 10.0)
        with self.assertRaises(RuntimeError):
            GestureController(ViewportState(10)).start(0.0)

    def test_bounds_hold_under_random_gestures_and_resizes(self):
        rng = np.random.default_rng(1234)
        vp = _laid_out(count=150, width=700.0)
        ctl = GestureController(vp)
        for _ in range(200):
            if rng.random() < 0.2:
                vp.resize(float(rng.uniform(120.0, 1600.0)))
                self.assert_in_bounds(vp)
                continue
            w = vp.width
            ctl.start(float(rng.uniform(0.0, w)))
            for _ in range(int(rng.integers(1, 6))):
                ctl.update(float(rng.uniform(0.3, 3.0)), float(rng.uniform(-50.0, w + 50.0)))
                self.assert_in_bounds(vp)
            ctl.end()


if __name__ == "__main__":
    unittest.main()
