import requests
from typing import Optional


class ReadinessClient:
    """Simple REST client for the readiness API."""

    def __init__(self, user_id: str, base_url: str = "http://localhost:8000") -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-User-Id": user_id}

    def _get(self, path: str, **params):
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=self.headers)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, **params):
        resp = requests.post(f"{self.base_url}{path}", params=params, headers=self.headers)
        resp.raise_for_status()
        return resp.json()

    def readiness(self, date: Optional[str] = None) -> dict:
        return self._get("/readiness", date=date)

    def log_soreness(self, date: str, score: int) -> dict:
        return self._post("/soreness", date=date, score=score)

    def soreness_history(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> list:
        return self._get("/soreness", start_date=start_date, end_date=end_date)

    def log_load(self, date: str, daily_load: float) -> None:
        self._post("/loads", date=date, daily_load=daily_load)

    def acwr(self) -> dict:
        return self._get("/loads/acwr")

    def log_set(
        self,
        exercise: str,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        velocity: Optional[float] = None,
    ) -> list:
        data = self._post("/sets", exercise=exercise, weight=weight, reps=reps, velocity=velocity)
        return data["new_prs"]

    def generate_finisher(self, session_id: int) -> dict:
        return self._post(f"/sessions/{session_id}/finisher/generate")
