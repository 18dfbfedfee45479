from __future__ import annotations

import datetime
import math
import numbers
from dataclasses import dataclass, field, asdict
from typing import Optional

from errors import ValidationError


PR_TYPES = ("1rm", "3rm", "velocity")


@dataclass
class DailyMetric:
    user_id: str
    date: str
    hrv_rmssd: Optional[float] = None
    sleep_minutes: Optional[float] = None


@dataclass
class SorenessEntry:
    user_id: str
    date: str
    score: int


@dataclass
class JumpTest:
    user_id: str
    date: str
    height_cm: float = 0.0


@dataclass
class ReadinessResult:
    readiness_score: int
    hrv_rmssd: float
    sleep_minutes: float
    soreness_score: int
    jump_cm: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DailyLoad:
    user_id: str
    date: str
    daily_load: float


@dataclass
class LoadWindow:
    date: str
    daily_load: float
    acute_7d: float
    chronic_28d: float
    acwr: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ExerciseObservation:
    user_id: str
    exercise: str
    weight: Optional[float] = None
    reps: Optional[int] = None
    velocity: Optional[float] = None
    rpe: Optional[float] = None
    timestamp: str = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc).isoformat()
    )


@dataclass
class PRRecord:
    user_id: str
    exercise: str
    type: str
    value: float
    achieved_at: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MuscleLoadEntry:
    user_id: str
    date: str
    muscle: str
    load_score: float


@dataclass
class ProtocolStep:
    step: str
    duration_seconds: int


@dataclass
class MobilityProtocol:
    id: int
    name: str
    muscle_targets: frozenset[str]
    steps: list[ProtocolStep] = field(default_factory=list)
    duration_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "muscle_targets": sorted(self.muscle_targets),
            "steps": [asdict(s) for s in self.steps],
            "duration_minutes": self.duration_minutes,
        }


@dataclass
class SessionFinisherAssignment:
    session_id: int
    protocol_id: int
    auto_assigned: bool

    def to_dict(self) -> dict:
        return asdict(self)


def validate_date(value: str) -> str:
    """Return ``value`` if it is an ISO ``YYYY-MM-DD`` date."""
    try:
        parsed = datetime.date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"invalid date: {value!r}")
    if parsed.isoformat() != value:
        raise ValidationError(f"invalid date: {value!r}")
    return value


def validate_number(name: str, value: Optional[float], *, minimum: Optional[float] = None) -> None:
    """Reject NaN, infinities and values below ``minimum``; ``None`` passes."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{name} must not be below {minimum:g}")
