"""Scalar mappers turning raw biometric readings into the unit interval."""

from .math_tools import MathTools


class Normalizer:
    """Clamp and scale raw readiness inputs to [0, 1].

    Out-of-range values are clamped rather than rejected.
    """

    HRV_REFERENCE: float = 100.0
    SLEEP_REFERENCE_MINUTES: float = 480.0
    SORENESS_MAX: int = 10
    SORENESS_SPAN: float = 9.0
    JUMP_REFERENCE_CM: float = 50.0

    @classmethod
    def hrv(cls, hrv_rmssd: float) -> float:
        return MathTools.clamp(hrv_rmssd / cls.HRV_REFERENCE, 0.0, 1.0)

    @classmethod
    def sleep(cls, sleep_minutes: float) -> float:
        return MathTools.clamp(sleep_minutes / cls.SLEEP_REFERENCE_MINUTES, 0.0, 1.0)

    @classmethod
    def soreness(cls, score: float) -> float:
        """Lower soreness maps to a higher normalized value."""
        return MathTools.clamp((cls.SORENESS_MAX - score) / cls.SORENESS_SPAN, 0.0, 1.0)

    @classmethod
    def jump(cls, height_cm: float) -> float:
        return MathTools.clamp(height_cm / cls.JUMP_REFERENCE_CM, 0.0, 1.0)
