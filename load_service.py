from __future__ import annotations

import logging
from typing import Optional

from algorithms import ACWRCalculator, SeriesFormatter, build_load_windows
from db import LoadSeriesRepository
from errors import ValidationError
from models import LoadWindow, validate_date
from settings_schema import EngineSettings

logger = logging.getLogger(__name__)


class LoadService:
    """Rolling acute/chronic load and ACWR over stored daily loads."""

    CHART_KINDS = ("acwr", "daily", "secondary")

    def __init__(
        self,
        load_repo: LoadSeriesRepository,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.loads = load_repo
        self.settings = settings or EngineSettings()

    def load_windows(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[LoadWindow]:
        if start_date:
            validate_date(start_date)
        if end_date:
            validate_date(end_date)
        series = self.loads.get_daily_load_series(user_id, start_date, end_date)
        return build_load_windows(
            series,
            corrected=self.settings.corrected_rolling_windows,
            acute_days=self.settings.acute_window_days,
            chronic_days=self.settings.chronic_window_days,
        )

    def latest_acwr(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Optional[dict]:
        """Return the most recent window with its display ratio and risk zone."""
        windows = self.load_windows(user_id, start_date, end_date)
        if not windows:
            return None
        last = windows[-1]
        return {
            "date": last.date,
            "acute_7d": last.acute_7d,
            "chronic_28d": last.chronic_28d,
            "acwr": ACWRCalculator.display(last.acwr),
            "risk_zone": ACWRCalculator.risk_zone(last.acwr),
        }

    def report_rows(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict]:
        """Windows in display form: loads to one decimal, ratio to two."""
        return [
            {
                "day": w.date,
                "daily_load": round(w.daily_load, 1),
                "acute_7d": round(w.acute_7d, 1),
                "chronic_28d": round(w.chronic_28d, 1),
                "acwr_7_28": ACWRCalculator.display(w.acwr),
            }
            for w in self.load_windows(user_id, start_date, end_date)
        ]

    def chart(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        *,
        kind: str = "acwr",
    ) -> list[dict]:
        if kind not in self.CHART_KINDS:
            raise ValidationError(f"unknown chart kind: {kind}")
        rows = self.report_rows(user_id, start_date, end_date)
        if kind == "secondary":
            return SeriesFormatter.load_secondary(rows)
        if kind == "daily":
            return SeriesFormatter.chart(rows, "day", "daily_load")
        return SeriesFormatter.chart(rows, "day", "acwr_7_28")
