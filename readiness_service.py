from __future__ import annotations

import datetime
import logging
from typing import Optional

from algorithms import CompositeReadiness, FourFactorReadiness, score_readiness
from db import MetricsRepository
from models import (
    DailyMetric,
    JumpTest,
    ReadinessResult,
    SorenessEntry,
    validate_date,
    validate_number,
)

logger = logging.getLogger(__name__)


class ReadinessService:
    """Compute daily readiness from stored biometrics."""

    # An athlete who has not reported soreness is scored as fully sore.
    MISSING_SORENESS = 10

    def __init__(self, metrics_repo: MetricsRepository) -> None:
        self.metrics = metrics_repo

    @staticmethod
    def _today() -> str:
        return datetime.date.today().isoformat()

    @staticmethod
    def _check_inputs(**inputs: Optional[float]) -> None:
        for name, value in inputs.items():
            validate_number(name, value)

    def today(self, user_id: str, date: Optional[str] = None) -> ReadinessResult:
        """Return the four-factor readiness for ``date`` (default today)."""
        day = validate_date(date) if date else self._today()
        metric = self.metrics.get_daily_metric(user_id, day)
        soreness = self.metrics.get_soreness_entry(user_id, day)
        jump = self.metrics.get_jump_test(user_id, day)

        hrv = metric.hrv_rmssd if metric and metric.hrv_rmssd is not None else 0.0
        sleep = metric.sleep_minutes if metric and metric.sleep_minutes is not None else 0.0
        soreness_score = soreness.score if soreness else self.MISSING_SORENESS
        jump_cm = jump.height_cm if jump else 0.0

        score = FourFactorReadiness.score(hrv, sleep, soreness_score, jump_cm)
        logger.debug("readiness for %s on %s: %s", user_id, day, score)
        return ReadinessResult(
            readiness_score=score,
            hrv_rmssd=hrv,
            sleep_minutes=sleep,
            soreness_score=soreness_score,
            jump_cm=float(jump_cm),
        )

    def composite(
        self,
        hrv: Optional[float] = None,
        resting_hr: Optional[float] = None,
        sleep_score: Optional[float] = None,
        soreness: Optional[float] = None,
        motivation: Optional[float] = None,
    ) -> dict:
        """Score the composite mode; absent inputs are left out entirely."""
        self._check_inputs(
            hrv=hrv,
            resting_hr=resting_hr,
            sleep_score=sleep_score,
            soreness=soreness,
            motivation=motivation,
        )
        components = CompositeReadiness.component_scores(
            hrv, resting_hr, sleep_score, soreness, motivation
        )
        score = CompositeReadiness.score(hrv, resting_hr, sleep_score, soreness, motivation)
        return {
            "readiness_score": score,
            "components": {k: round(v, 2) for k, v in components.items()},
        }

    def score(self, **inputs: Optional[float]) -> dict:
        """Score raw inputs with whichever mode they call for."""
        self._check_inputs(**inputs)
        mode, score = score_readiness(**inputs)
        return {"mode": mode, "readiness_score": score}

    def log_daily_metric(
        self,
        user_id: str,
        date: str,
        hrv_rmssd: Optional[float] = None,
        sleep_minutes: Optional[float] = None,
    ) -> DailyMetric:
        metric = DailyMetric(user_id, date, hrv_rmssd, sleep_minutes)
        self.metrics.upsert_daily_metric(metric)
        return metric

    def log_soreness(self, user_id: str, date: str, score: int) -> SorenessEntry:
        entry = SorenessEntry(user_id=user_id, date=date, score=score)
        self.metrics.upsert_soreness_entry(entry)
        return entry

    def log_jump_test(self, user_id: str, date: str, height_cm: Optional[float] = None) -> int:
        validate_number("jump height", height_cm, minimum=0)
        return self.metrics.add_jump_test(
            JumpTest(user_id=user_id, date=date, height_cm=height_cm or 0.0)
        )

    def soreness_history(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict]:
        """Return stored soreness entries, oldest first."""
        if start_date:
            validate_date(start_date)
        if end_date:
            validate_date(end_date)
        entries = self.metrics.fetch_soreness_history(user_id, start_date, end_date)
        return [{"date": e.date, "score": e.score} for e in entries]
