import math
from typing import Iterable

from errors import ValidationError


class MathTools:
    """Provides essential mathematical utilities for strength calculations."""

    EPLEY_DIVISOR: float = 30.0
    THREE_RM_DIVISOR: float = 10.0

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Epley formula.

        A single rep is already a one-rep max and is returned unchanged.
        """
        if reps < 1:
            raise ValidationError("reps must be at least 1")
        if reps == 1:
            return float(weight)
        return weight * (1 + reps / cls.EPLEY_DIVISOR)

    @classmethod
    def three_rm(cls, weight: float, reps: int) -> float:
        """Return the estimated three-rep max for a set."""
        if reps < 1:
            raise ValidationError("reps must be at least 1")
        return weight * (1 + reps / cls.THREE_RM_DIVISOR)

    @staticmethod
    def tonnage(sets: Iterable[tuple[int, float]]) -> float:
        """Compute training tonnage as the sum of reps times load."""
        total = 0.0
        for reps, load in sets:
            total += reps * load
        return total

    @staticmethod
    def weighted_sum(values: Iterable[float], weights: Iterable[float]) -> float:
        total = 0.0
        for v, w in zip(values, weights):
            total += v * w
        return total

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer with halves rounded towards +inf."""
        return int(math.floor(value + 0.5))
