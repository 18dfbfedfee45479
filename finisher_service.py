from __future__ import annotations

import datetime
import logging
from typing import Optional

from algorithms import FinisherProtocolSelector
from db import (
    FinisherAssignmentRepository,
    MuscleLoadRepository,
    ProtocolRepository,
    SessionRepository,
)
from errors import NotFoundError
from events import FINISHER_ASSIGNED, EventPublisher, publish_safely
from models import SessionFinisherAssignment

logger = logging.getLogger(__name__)


class FinisherService:
    """Attach a mobility finisher protocol to a workout session."""

    def __init__(
        self,
        session_repo: SessionRepository,
        muscle_repo: MuscleLoadRepository,
        protocol_repo: ProtocolRepository,
        assignment_repo: FinisherAssignmentRepository,
        publisher: Optional[EventPublisher] = None,
    ) -> None:
        self.sessions = session_repo
        self.muscle_loads = muscle_repo
        self.protocols = protocol_repo
        self.assignments = assignment_repo
        self.publisher = publisher

    def _session(self, user_id: str, session_id: int) -> dict:
        session = self.sessions.fetch(session_id, user_id)
        if session is None:
            raise NotFoundError("session not found")
        return session

    @staticmethod
    def session_date(started_at: str) -> str:
        """Return the UTC calendar date of an ISO timestamp.

        Naive timestamps are taken as already being in UTC.
        """
        ts = datetime.datetime.fromisoformat(started_at.replace("Z", "+00:00"))
        if ts.tzinfo is not None:
            ts = ts.astimezone(datetime.timezone.utc)
        return ts.date().isoformat()

    def _announce(self, user_id: str, assignment: SessionFinisherAssignment) -> None:
        publish_safely(
            self.publisher,
            user_id,
            FINISHER_ASSIGNED,
            {"session_id": assignment.session_id, "protocol_id": assignment.protocol_id},
        )

    def generate(self, user_id: str, session_id: int) -> dict:
        """Pick the best protocol for the session's day and store it.

        Raises :class:`NotFoundError` when the session does not belong to
        ``user_id``, when no muscle loads were logged that day, or when the
        protocol catalog is empty.
        """
        session = self._session(user_id, session_id)
        day = self.session_date(session["started_at"])
        entries = self.muscle_loads.get_muscle_load_for_day(user_id, day)
        protocol, score = FinisherProtocolSelector.select(
            entries, self.protocols.list_protocols()
        )
        assignment = self.assignments.upsert_assignment(session_id, protocol.id, True)
        logger.info(
            "assigned protocol %s to session %s (score %.1f)", protocol.id, session_id, score
        )
        self._announce(user_id, assignment)
        return {
            **assignment.to_dict(),
            "score": score,
            "protocol": protocol.to_dict(),
        }

    def assign(self, user_id: str, session_id: int, protocol_id: int) -> SessionFinisherAssignment:
        """Manually attach ``protocol_id`` to the session."""
        self._session(user_id, session_id)
        if self.protocols.fetch(protocol_id) is None:
            raise NotFoundError("protocol not found")
        assignment = self.assignments.upsert_assignment(session_id, protocol_id, False)
        logger.info("manually assigned protocol %s to session %s", protocol_id, session_id)
        self._announce(user_id, assignment)
        return assignment

    def current(self, user_id: str, session_id: int) -> Optional[SessionFinisherAssignment]:
        self._session(user_id, session_id)
        return self.assignments.fetch(session_id)
