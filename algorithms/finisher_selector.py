from __future__ import annotations

from typing import Iterable, Sequence

from errors import NotFoundError
from models import MobilityProtocol, MuscleLoadEntry


class FinisherProtocolSelector:
    """Pick the mobility protocol covering the day's most loaded muscles."""

    @staticmethod
    def protocol_score(
        protocol: MobilityProtocol, loads: dict[str, float]
    ) -> float:
        return sum(loads.get(muscle, 0.0) for muscle in protocol.muscle_targets)

    @staticmethod
    def muscle_loads(entries: Iterable[MuscleLoadEntry]) -> dict[str, float]:
        loads: dict[str, float] = {}
        for entry in entries:
            loads[entry.muscle] = loads.get(entry.muscle, 0.0) + float(entry.load_score)
        return loads

    @classmethod
    def rank(
        cls,
        entries: Sequence[MuscleLoadEntry],
        catalog: Sequence[MobilityProtocol],
    ) -> list[tuple[MobilityProtocol, float]]:
        """Return ``(protocol, score)`` pairs, best first.

        Equal scores keep catalog order.
        """
        loads = cls.muscle_loads(entries)
        scored = [(p, cls.protocol_score(p, loads)) for p in catalog]
        return sorted(scored, key=lambda item: -item[1])

    @classmethod
    def select(
        cls,
        entries: Sequence[MuscleLoadEntry],
        catalog: Sequence[MobilityProtocol],
    ) -> tuple[MobilityProtocol, float]:
        """Return the highest scoring protocol and its score.

        A score of 0 is a valid outcome. A day without any muscle load
        entries and an empty catalog both raise :class:`NotFoundError`.
        """
        if not entries:
            raise NotFoundError("no muscle load data for this day")
        ranked = cls.rank(entries, catalog)
        if not ranked:
            raise NotFoundError("no mobility protocols available")
        return ranked[0]
