from __future__ import annotations

import datetime
import logging
from typing import Optional

from algorithms import PRDetector
from db import PRRepository
from errors import ValidationError
from events import PR_ACHIEVED, EventPublisher, publish_safely
from models import ExerciseObservation, PRRecord, validate_number

logger = logging.getLogger(__name__)


class PRService:
    """Log sets and keep personal records up to date."""

    def __init__(
        self,
        pr_repo: PRRepository,
        publisher: Optional[EventPublisher] = None,
    ) -> None:
        self.records = pr_repo
        self.publisher = publisher

    @staticmethod
    def validate(observation: ExerciseObservation) -> None:
        if not observation.exercise or not observation.exercise.strip():
            raise ValidationError("exercise required")
        has_weight = observation.weight is not None
        has_reps = observation.reps is not None
        if has_weight != has_reps:
            raise ValidationError("weight and reps must be given together")
        if not has_weight and observation.velocity is None:
            raise ValidationError("weight and reps or velocity required")
        validate_number("weight", observation.weight, minimum=0)
        if has_reps:
            if isinstance(observation.reps, bool) or not isinstance(observation.reps, int):
                raise ValidationError("reps must be an integer")
            if observation.reps < 1:
                raise ValidationError("reps must be at least 1")
        validate_number("velocity", observation.velocity, minimum=0)
        validate_number("rpe", observation.rpe, minimum=1)
        if observation.rpe is not None and observation.rpe > 10:
            raise ValidationError("rpe must be between 1 and 10")
        try:
            datetime.datetime.fromisoformat(observation.timestamp)
        except (TypeError, ValueError):
            raise ValidationError(f"invalid timestamp: {observation.timestamp!r}")

    def log_set(
        self,
        user_id: str,
        exercise: str,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        velocity: Optional[float] = None,
        rpe: Optional[float] = None,
        timestamp: Optional[str] = None,
    ) -> list[PRRecord]:
        """Record a set and return the personal records it set."""
        observation = ExerciseObservation(
            user_id=user_id,
            exercise=exercise.strip() if exercise else exercise,
            weight=weight,
            reps=reps,
            velocity=velocity,
            rpe=rpe,
        )
        if timestamp:
            observation.timestamp = timestamp
        return self.process(observation)

    def process(self, observation: ExerciseObservation) -> list[PRRecord]:
        self.validate(observation)
        bests = self.records.get_bests(observation.user_id, observation.exercise)
        achieved: list[PRRecord] = []
        for record in PRDetector.detect(observation, bests):
            # a concurrent write may already hold an equal or better value
            if not self.records.upsert_pr(record):
                logger.debug(
                    "skipped %s %s candidate %.2f for %s",
                    record.exercise,
                    record.type,
                    record.value,
                    record.user_id,
                )
                continue
            logger.info(
                "new %s record for %s on %s: %.2f",
                record.type,
                record.user_id,
                record.exercise,
                record.value,
            )
            achieved.append(record)
            publish_safely(
                self.publisher,
                record.user_id,
                PR_ACHIEVED,
                {"exercise": record.exercise, "type": record.type, "value": record.value},
            )
        return achieved

    def best_records(self, user_id: str, exercise: Optional[str] = None) -> list[PRRecord]:
        return self.records.fetch_for_user(user_id, exercise)
