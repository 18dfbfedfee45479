"""Rolling training-load windows and the acute:chronic workload ratio."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from models import DailyLoad, LoadWindow


class RollingWindowAggregator:
    """Compute trailing averages over a daily load series.

    The series must already be ordered by date ascending. By default the
    divisor is the nominal window length even when fewer days are available,
    so the first days of a series read low. Pass ``corrected=True`` to divide
    by the number of days actually present instead.
    """

    ACUTE_DAYS: int = 7
    CHRONIC_DAYS: int = 28

    @staticmethod
    def rolling_mean(
        loads: Sequence[float], window: int, corrected: bool = False
    ) -> list[float]:
        if window <= 0:
            raise ValueError("window must be positive")
        values = np.asarray(list(loads), dtype=float)
        result: list[float] = []
        for i in range(values.size):
            chunk = values[max(0, i - window + 1) : i + 1]
            divisor = chunk.size if corrected else window
            result.append(float(np.sum(chunk)) / divisor)
        return result

    @classmethod
    def acute(cls, loads: Sequence[float], corrected: bool = False) -> list[float]:
        return cls.rolling_mean(loads, cls.ACUTE_DAYS, corrected)

    @classmethod
    def chronic(cls, loads: Sequence[float], corrected: bool = False) -> list[float]:
        return cls.rolling_mean(loads, cls.CHRONIC_DAYS, corrected)


class ACWRCalculator:
    """Divide acute by chronic load with a zero-chronic guard."""

    RISK_ZONES: tuple[tuple[float, float, str], ...] = (
        (0.0, 0.8, "Low Risk"),
        (0.8, 1.3, "Optimal"),
        (1.3, 2.0, "Moderate Risk"),
        (2.0, 3.0, "High Risk"),
    )

    @staticmethod
    def ratio(acute: float, chronic: float) -> float:
        return acute / chronic if chronic > 0 else 0.0

    @classmethod
    def series(cls, acute: Iterable[float], chronic: Iterable[float]) -> list[float]:
        return [cls.ratio(a, c) for a, c in zip(acute, chronic)]

    @staticmethod
    def display(acwr: float) -> float:
        """Round a ratio to two decimals for presentation."""
        return round(acwr, 2)

    @classmethod
    def risk_zone(cls, acwr: float) -> Optional[str]:
        """Return the risk label for ``acwr``.

        Ratios at or above the top band's upper edge stay in the top band;
        negative ratios have no zone.
        """
        for low, high, label in cls.RISK_ZONES:
            if low <= acwr < high:
                return label
        if acwr >= cls.RISK_ZONES[-1][1]:
            return cls.RISK_ZONES[-1][2]
        return None


def build_load_windows(
    series: Sequence[DailyLoad],
    *,
    corrected: bool = False,
    acute_days: int = RollingWindowAggregator.ACUTE_DAYS,
    chronic_days: int = RollingWindowAggregator.CHRONIC_DAYS,
) -> list[LoadWindow]:
    """Turn an ordered daily load series into one ``LoadWindow`` per day."""
    loads = [float(d.daily_load) for d in series]
    acute = RollingWindowAggregator.rolling_mean(loads, acute_days, corrected)
    chronic = RollingWindowAggregator.rolling_mean(loads, chronic_days, corrected)
    ratios = ACWRCalculator.series(acute, chronic)
    return [
        LoadWindow(
            date=day.date,
            daily_load=load,
            acute_7d=a,
            chronic_28d=c,
            acwr=r,
        )
        for day, load, a, c, r in zip(series, loads, acute, chronic, ratios)
    ]
