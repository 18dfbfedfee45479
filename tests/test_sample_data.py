import datetime
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from sample_data import (
    ATHLETES,
    generate_load_series,
    generate_sleep_series,
    generate_soreness_series,
)

END = datetime.date(2024, 5, 26)  # a Sunday


def test_load_series_is_deterministic():
    athlete = ATHLETES[0]
    first = generate_load_series(athlete, 27, seed=3, end=END)
    assert first == generate_load_series(athlete, 27, seed=3, end=END)
    assert first != generate_load_series(athlete, 27, seed=4, end=END)
    assert len(first) == 28
    assert first[-1][0] == "2024-05-26"


def test_load_series_weekly_pattern():
    athlete = ATHLETES[3]
    series = generate_load_series(athlete, 55, seed=1, end=END)
    hard, weekend = [], []
    for day, load in series:
        weekday = datetime.date.fromisoformat(day).weekday()
        if weekday in (0, 2, 4):
            hard.append(load)
        elif weekday >= 5:
            weekend.append(load)
        assert load >= 0
    assert min(hard) > max(weekend)


def test_soreness_bounds_follow_readiness():
    recovering = generate_soreness_series(ATHLETES[2], 30, seed=2, end=END)
    elite = generate_soreness_series(ATHLETES[0], 30, seed=2, end=END)
    assert all(1 <= r["score"] <= 10 for r in recovering + elite)
    assert sum(r["score"] for r in recovering) > sum(r["score"] for r in elite)


def test_sleep_stages_add_up():
    for row in generate_sleep_series(ATHLETES[1], 14, seed=5, end=END):
        total = row["deep_minutes"] + row["light_minutes"] + row["rem_minutes"]
        assert total == row["sleep_minutes"]
        assert 5 <= row["total_sleep_hours"] <= 10
