"""Readiness scoring.

Two scoring modes coexist and treat missing inputs differently:

* ``FourFactorReadiness`` weights HRV, sleep, soreness and jump height equally
  and scores an absent input as 0.
* ``CompositeReadiness`` uses unequal weights over a richer set of inputs and
  drops absent inputs from both the weighted sum and the weight total.
"""

from __future__ import annotations

from typing import Optional

from .math_tools import MathTools
from .normalization import Normalizer


class FourFactorReadiness:
    """Equal-weight readiness over HRV, sleep, soreness and jump height."""

    WEIGHTS: dict[str, float] = {
        "hrv": 0.25,
        "sleep": 0.25,
        "soreness": 0.25,
        "jump": 0.25,
    }

    @classmethod
    def factors(
        cls,
        hrv_rmssd: Optional[float] = None,
        sleep_minutes: Optional[float] = None,
        soreness: Optional[float] = None,
        jump_cm: Optional[float] = None,
    ) -> dict[str, float]:
        """Return the normalized factors, using 0 for any absent input."""
        return {
            "hrv": Normalizer.hrv(hrv_rmssd) if hrv_rmssd is not None else 0.0,
            "sleep": Normalizer.sleep(sleep_minutes) if sleep_minutes is not None else 0.0,
            "soreness": Normalizer.soreness(soreness) if soreness is not None else 0.0,
            "jump": Normalizer.jump(jump_cm) if jump_cm is not None else 0.0,
        }

    @classmethod
    def score(
        cls,
        hrv_rmssd: Optional[float] = None,
        sleep_minutes: Optional[float] = None,
        soreness: Optional[float] = None,
        jump_cm: Optional[float] = None,
    ) -> int:
        """Return the readiness score in 0-100."""
        factors = cls.factors(hrv_rmssd, sleep_minutes, soreness, jump_cm)
        keys = list(cls.WEIGHTS)
        total = MathTools.weighted_sum(
            [factors[k] for k in keys], [cls.WEIGHTS[k] for k in keys]
        )
        return MathTools.round_half_up(total * 100)


class CompositeReadiness:
    """Variable-weight readiness over whichever inputs are present."""

    WEIGHTS: dict[str, float] = {
        "hrv": 0.30,
        "resting_hr": 0.20,
        "sleep_score": 0.25,
        "soreness": 0.15,
        "motivation": 0.10,
    }

    @staticmethod
    def _hrv(hrv: float) -> float:
        # 20-80 ms band, higher is better
        return MathTools.clamp((hrv - 20) / 60 * 100, 0.0, 100.0)

    @staticmethod
    def _resting_hr(resting_hr: float) -> float:
        # 40-100 bpm band, lower is better
        return MathTools.clamp((100 - resting_hr) / 60 * 100, 0.0, 100.0)

    @staticmethod
    def _sleep_score(sleep_score: float) -> float:
        return float(sleep_score)

    @staticmethod
    def _soreness(soreness: float) -> float:
        return max(0.0, (10 - soreness) / 9 * 100)

    @staticmethod
    def _motivation(motivation: float) -> float:
        return (motivation - 1) / 9 * 100

    @classmethod
    def component_scores(
        cls,
        hrv: Optional[float] = None,
        resting_hr: Optional[float] = None,
        sleep_score: Optional[float] = None,
        soreness: Optional[float] = None,
        motivation: Optional[float] = None,
    ) -> dict[str, float]:
        """Return 0-100 component scores for the inputs that are present."""
        raw = {
            "hrv": (hrv, cls._hrv),
            "resting_hr": (resting_hr, cls._resting_hr),
            "sleep_score": (sleep_score, cls._sleep_score),
            "soreness": (soreness, cls._soreness),
            "motivation": (motivation, cls._motivation),
        }
        return {key: fn(value) for key, (value, fn) in raw.items() if value is not None}

    @classmethod
    def score(
        cls,
        hrv: Optional[float] = None,
        resting_hr: Optional[float] = None,
        sleep_score: Optional[float] = None,
        soreness: Optional[float] = None,
        motivation: Optional[float] = None,
    ) -> int:
        components = cls.component_scores(hrv, resting_hr, sleep_score, soreness, motivation)
        total_weight = sum(cls.WEIGHTS[k] for k in components)
        if total_weight <= 0:
            return 0
        total = MathTools.weighted_sum(
            components.values(), [cls.WEIGHTS[k] for k in components]
        )
        return MathTools.round_half_up(total / total_weight)


def score_readiness(
    *,
    hrv_rmssd: Optional[float] = None,
    sleep_minutes: Optional[float] = None,
    soreness: Optional[float] = None,
    jump_cm: Optional[float] = None,
    resting_hr: Optional[float] = None,
    sleep_score: Optional[float] = None,
    motivation: Optional[float] = None,
) -> tuple[str, int]:
    """Score with the mode matching the supplied inputs.

    Returns ``(mode, score)``. Composite mode is used when any of the richer
    inputs (resting HR, sleep score, motivation) is present.
    """
    if resting_hr is not None or sleep_score is not None or motivation is not None:
        return "composite", CompositeReadiness.score(
            hrv=hrv_rmssd,
            resting_hr=resting_hr,
            sleep_score=sleep_score,
            soreness=soreness,
            motivation=motivation,
        )
    return "four_factor", FourFactorReadiness.score(
        hrv_rmssd, sleep_minutes, soreness, jump_cm
    )
