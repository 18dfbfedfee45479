import datetime
from rest_api import ReadinessAPI
from sample_data import (
    ATHLETES,
    generate_load_series,
    generate_sleep_series,
    generate_soreness_series,
)


PROTOCOLS = (
    ("Hip and hamstring flow", ["hamstrings", "glutes", "hip_flexors"], 8),
    ("Thoracic opener", ["upper_back", "chest", "shoulders"], 6),
    ("Calf and ankle reset", ["calves", "ankles"], 5),
)


def seed(api: ReadinessAPI = None, period: int = 42) -> bool:
    """Fill an empty database with demo athletes; return False if data exists."""
    api = api or ReadinessAPI()
    if api.protocols.list_protocols():
        print("Database already contains data")
        return False

    for name, muscles, minutes in PROTOCOLS:
        api.protocols.add(name, muscles, duration_minutes=minutes)
    end = datetime.date.today()
    for idx, athlete in enumerate(ATHLETES):
        api.loads.bulk_log(athlete.id, generate_load_series(athlete, period, seed=idx, end=end))
        for row in generate_sleep_series(athlete, period, seed=idx, end=end):
            api.readiness.log_daily_metric(
                athlete.id, row["day"], row["hrv_rmssd"], row["sleep_minutes"]
            )
        for row in generate_soreness_series(athlete, period, seed=idx, end=end):
            api.readiness.log_soreness(athlete.id, row["day"], row["score"])
    print("Seed data inserted")
    return True


if __name__ == "__main__":
    seed()
