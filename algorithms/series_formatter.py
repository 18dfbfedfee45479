"""Reshape daily and hourly series into chart points.

Missing or falsy values become 0; nothing here validates or raises.
"""

from __future__ import annotations

import datetime
from typing import Any, Iterable, Mapping, Sequence


class SeriesFormatter:
    """Build ``{"x": ..., "y": ...}`` points for charting."""

    @staticmethod
    def _value(row: Mapping[str, Any], key: str) -> Any:
        return row.get(key) or 0

    @staticmethod
    def hour_of(value: Any) -> int:
        if isinstance(value, datetime.datetime):
            return value.hour
        try:
            return datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00")).hour
        except ValueError:
            return 0

    @classmethod
    def chart(
        cls,
        rows: Iterable[Mapping[str, Any]],
        x_key: str,
        y_key: str,
        passthrough: Sequence[str] = (),
    ) -> list[dict]:
        points = []
        for row in rows:
            point = {"x": row.get(x_key), "y": cls._value(row, y_key)}
            for key in passthrough:
                point[key] = cls._value(row, key)
            points.append(point)
        return points

    @classmethod
    def hourly_chart(
        cls,
        rows: Iterable[Mapping[str, Any]],
        x_key: str,
        y_key: str,
        passthrough: Sequence[str] = (),
    ) -> list[dict]:
        points = cls.chart(rows, x_key, y_key, passthrough)
        for point in points:
            point["hour"] = cls.hour_of(point["x"])
        return points

    @classmethod
    def sleep_chart(cls, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        """Total sleep hours with deep, light and REM stages in hours."""
        return [
            {
                "x": row.get("day"),
                "y": cls._value(row, "total_sleep_hours"),
                "deep": cls._value(row, "deep_minutes") / 60,
                "light": cls._value(row, "light_minutes") / 60,
                "rem": cls._value(row, "rem_minutes") / 60,
            }
            for row in rows
        ]

    @classmethod
    def hourly_sleep_chart(cls, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        points = cls.sleep_chart(rows)
        for point in points:
            point["hour"] = cls.hour_of(point["x"])
        return points

    @classmethod
    def load_secondary(cls, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        """Acute and chronic load side by side; ``y`` is their sum."""
        points = []
        for row in rows:
            acute = cls._value(row, "acute_7d")
            chronic = cls._value(row, "chronic_28d")
            points.append(
                {"x": row.get("day"), "y": acute + chronic, "acute": acute, "chronic": chronic}
            )
        return points

    @classmethod
    def hourly_load_secondary(cls, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        points = cls.load_secondary(rows)
        for point in points:
            point["hour"] = cls.hour_of(point["x"])
        return points
