from __future__ import annotations

from typing import Mapping, Optional

from models import ExerciseObservation, PRRecord
from .math_tools import MathTools


class PRDetector:
    """Detect personal records for a single logged set."""

    @staticmethod
    def candidates(observation: ExerciseObservation) -> dict[str, float]:
        """Return candidate values keyed by PR type for the inputs present."""
        values: dict[str, float] = {}
        if observation.weight is not None and observation.reps is not None:
            values["1rm"] = MathTools.epley_1rm(observation.weight, observation.reps)
            values["3rm"] = MathTools.three_rm(observation.weight, observation.reps)
        if observation.velocity is not None:
            values["velocity"] = float(observation.velocity)
        return values

    @staticmethod
    def is_new_pr(value: float, existing: Optional[PRRecord]) -> bool:
        """Ties are not records; the value must strictly beat the stored best."""
        return existing is None or value > existing.value

    @classmethod
    def detect(
        cls,
        observation: ExerciseObservation,
        bests: Mapping[str, Optional[PRRecord]],
    ) -> list[PRRecord]:
        """Return the new records ``observation`` sets against ``bests``.

        ``bests`` maps PR type to the stored record, or ``None`` when the
        athlete has no record of that type yet.
        """
        records: list[PRRecord] = []
        for pr_type, value in cls.candidates(observation).items():
            if cls.is_new_pr(value, bests.get(pr_type)):
                records.append(
                    PRRecord(
                        user_id=observation.user_id,
                        exercise=observation.exercise,
                        type=pr_type,
                        value=value,
                        achieved_at=observation.timestamp,
                    )
                )
        return records
