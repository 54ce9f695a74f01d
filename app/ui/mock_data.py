from typing import Optional

import numpy as np

from chartcore.candle_data import CandleSeries

DAY_MS = 86_400_000


def mock_daily_series(count: int = 400, start_ms: int = 1_577_836_800_000, seed: Optional[int] = 7) -> CandleSeries:
    """Random-walk daily bars for the demo window."""
    rng = np.random.default_rng(seed)
    returns = rng.normal(0.0005, 0.02, size=count)
    closes = 100.0 * np.exp(np.cumsum(returns))
    opens = np.concatenate(([closes[0]], closes[:-1])) * (1.0 + rng.normal(0.0, 0.004, size=count))
    spread = np.abs(rng.normal(0.0, 0.012, size=count)) * closes
    highs = np.maximum(opens, closes) + spread
    lows = np.minimum(opens, closes) - spread
    volumes = rng.lognormal(mean=15.0, sigma=0.5, size=count)
    rows = [
        [start_ms + i * DAY_MS, opens[i], highs[i], lows[i], closes[i], volumes[i]]
        for i in range(count)
    ]
    return CandleSeries.from_rows(rows)
