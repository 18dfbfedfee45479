"""Deterministic demo athletes and synthetic daily series.

Only the CLI and the seed script use this module; the engine never imports it.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

import numpy as np

HARD_DAYS = (0, 2, 4)
EASY_DAYS = (1, 3)


@dataclass(frozen=True)
class AthleteProfile:
    id: str
    name: str
    profile: str
    base_readiness: float
    base_sleep: float
    base_load: float


ATHLETES = (
    AthleteProfile("550e8400-e29b-41d4-a716-446655440001", "Sarah Johnson", "elite", 85, 8.2, 15),
    AthleteProfile("550e8400-e29b-41d4-a716-446655440002", "Mike Chen", "developing", 72, 7.5, 12),
    AthleteProfile("550e8400-e29b-41d4-a716-446655440003", "Alex Rodriguez", "recovering", 65, 6.8, 8),
    AthleteProfile("550e8400-e29b-41d4-a716-446655440004", "Emma Thompson", "peaking", 78, 7.8, 18),
    AthleteProfile("550e8400-e29b-41d4-a716-446655440005", "Jordan Kim", "baseline", 75, 7.2, 10),
)


def _days(period: int, end: Optional[datetime.date]) -> list[datetime.date]:
    end = end or datetime.date.today()
    start = end - datetime.timedelta(days=period)
    return [start + datetime.timedelta(days=i) for i in range(period + 1)]


def generate_load_series(
    athlete: AthleteProfile,
    period: int,
    *,
    seed: int = 0,
    end: Optional[datetime.date] = None,
) -> list[tuple[str, float]]:
    """Daily training loads: hard Mon/Wed/Fri, easy Tue/Thu, light weekends."""
    rng = np.random.default_rng(seed)
    series = []
    for day in _days(period, end):
        weekday = day.weekday()
        if weekday in HARD_DAYS:
            load = athlete.base_load + (rng.random() - 0.3) * 8
        elif weekday in EASY_DAYS:
            load = athlete.base_load * 0.6 + (rng.random() - 0.5) * 4
        else:
            load = athlete.base_load * 0.2 + rng.random() * 3
        series.append((day.isoformat(), round(max(0.0, float(load)), 1)))
    return series


def generate_soreness_series(
    athlete: AthleteProfile,
    period: int,
    *,
    seed: int = 0,
    end: Optional[datetime.date] = None,
) -> list[dict]:
    """Daily 1-10 soreness; the lower the athlete's readiness, the sorer."""
    rng = np.random.default_rng(seed)
    rows = []
    for day in _days(period, end):
        weekday = day.weekday()
        bonus = 5 if weekday >= 5 else 0
        stress = -3 if weekday in HARD_DAYS else 0
        readiness = float(
            np.clip(athlete.base_readiness + bonus + stress + (rng.random() - 0.5) * 8, 30, 100)
        )
        score = int(np.clip(round((100 - readiness) / 10) + 1, 1, 10))
        rows.append({"day": day.isoformat(), "score": score})
    return rows


def generate_sleep_series(
    athlete: AthleteProfile,
    period: int,
    *,
    seed: int = 0,
    end: Optional[datetime.date] = None,
) -> list[dict]:
    """Nightly sleep with stage minutes; stage minutes sum to the total."""
    rng = np.random.default_rng(seed)
    rows = []
    for day in _days(period, end):
        bonus = 0.5 if day.weekday() >= 5 else 0.0
        total = float(np.clip(athlete.base_sleep + bonus + (rng.random() - 0.5) * 1.5, 5, 10))
        total_minutes = int(round(total * 60))
        deep = int(round(total_minutes * (0.15 + rng.random() * 0.1)))
        rem = int(round(total_minutes * (0.20 + rng.random() * 0.1)))
        rows.append(
            {
                "day": day.isoformat(),
                "total_sleep_hours": round(total, 1),
                "sleep_minutes": total_minutes,
                "deep_minutes": deep,
                "light_minutes": total_minutes - deep - rem,
                "rem_minutes": rem,
                "hrv_rmssd": int(round(25 + rng.random() * 25)),
            }
        )
    return rows
