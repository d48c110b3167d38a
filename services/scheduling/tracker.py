"""
NIGHTPLAN Real-Time Tracker

Holds placed sequences while they execute and applies status changes
reported by the sequencer:

    pending ──> running ──> completed
       │           ├──────> failed
       │           └──────> cancelled
       ├──> failed
       └──> cancelled

``actual_start`` is stamped on entering running, ``actual_end`` on entering
any terminal state.

Placements are copied on the way in and on the way out; status only changes
through ``update_scheduled_sequence_status``.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from nightplan.exceptions import InvalidStatusTransitionError
from nightplan.logging_config import get_logger
from nightplan.types import Clock, ensure_utc, utc_now

from .models import ScheduledSequence, SequenceStatus

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[SequenceStatus, frozenset[SequenceStatus]] = {
    SequenceStatus.PENDING: frozenset(
        {SequenceStatus.RUNNING, SequenceStatus.FAILED, SequenceStatus.CANCELLED}
    ),
    SequenceStatus.RUNNING: frozenset(
        {SequenceStatus.COMPLETED, SequenceStatus.FAILED, SequenceStatus.CANCELLED}
    ),
    SequenceStatus.COMPLETED: frozenset(),
    SequenceStatus.FAILED: frozenset(),
    SequenceStatus.CANCELLED: frozenset(),
}


class ScheduleTracker:
    """Owned store of scheduled sequences with status transitions."""

    def __init__(self, clock: Clock = utc_now):
        self._sequences: list[ScheduledSequence] = []
        self._lock = threading.Lock()
        self._clock = clock

    def track(self, scheduled: Iterable[ScheduledSequence]) -> None:
        """Start tracking placements in addition to those already held."""
        items = [_copy(s) for s in scheduled]
        with self._lock:
            self._sequences.extend(items)
        if items:
            logger.info(f"Tracking {len(items)} scheduled sequence(s)")

    def replace_schedule(self, scheduled: Iterable[ScheduledSequence]) -> None:
        """Swap in a new plan.

        Pending placements from earlier plans are dropped. Running and
        finished ones stay as history.
        """
        items = [_copy(s) for s in scheduled]
        with self._lock:
            kept = [s for s in self._sequences if s.status is not SequenceStatus.PENDING]
            dropped = len(self._sequences) - len(kept)
            self._sequences = kept + items
        if dropped:
            logger.info(f"Dropped {dropped} superseded pending placement(s)")
        logger.info(f"Tracking {len(items)} scheduled sequence(s)")

    def clear(self) -> None:
        with self._lock:
            self._sequences.clear()

    def get_scheduled_sequences(self) -> list[ScheduledSequence]:
        with self._lock:
            return [_copy(s) for s in self._sequences]

    def get(self, scheduled_id: str) -> Optional[ScheduledSequence]:
        with self._lock:
            scheduled = self._find(scheduled_id)
            return _copy(scheduled) if scheduled is not None else None

    def get_next_scheduled_sequence(
        self,
        now: Optional[datetime] = None,
    ) -> Optional[ScheduledSequence]:
        """Earliest pending placement that starts after ``now``."""
        now = ensure_utc(now) if now is not None else self._clock()
        with self._lock:
            upcoming = [
                s for s in self._sequences
                if s.status is SequenceStatus.PENDING and s.scheduled_start > now
            ]
            if not upcoming:
                return None
            return _copy(min(upcoming, key=lambda s: s.scheduled_start))

    def update_scheduled_sequence_status(
        self,
        scheduled_id: str,
        status: SequenceStatus,
    ) -> Optional[ScheduledSequence]:
        """Apply a status change.

        Returns:
            The updated placement, or None when the id is unknown (no-op)

        Raises:
            InvalidStatusTransitionError: The lifecycle does not allow it
        """
        with self._lock:
            scheduled = self._find(scheduled_id)
            if scheduled is None:
                logger.warning(f"Status update for unknown scheduled sequence {scheduled_id}")
                return None

            current = scheduled.status
            if status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidStatusTransitionError(
                    f"Cannot move scheduled sequence from {current.value} to {status.value}",
                    sequence_id=scheduled_id,
                    current_status=current.value,
                    requested_status=status.value,
                )

            scheduled.status = status
            if status is SequenceStatus.RUNNING:
                scheduled.actual_start = self._clock()
            elif status.is_terminal:
                scheduled.actual_end = self._clock()
            updated = _copy(scheduled)

        logger.info(f"Scheduled sequence {scheduled_id}: {current.value} -> {status.value}")
        return updated

    def _find(self, scheduled_id: str) -> Optional[ScheduledSequence]:
        for scheduled in self._sequences:
            if scheduled.id == scheduled_id:
                return scheduled
        return None


def _copy(scheduled: ScheduledSequence) -> ScheduledSequence:
    metadata = scheduled.metadata
    return replace(
        scheduled,
        metadata=replace(
            metadata,
            weather_requirements=list(metadata.weather_requirements),
            equipment_requirements=list(metadata.equipment_requirements),
        ),
        rules=list(scheduled.rules),
        conditions=list(scheduled.conditions),
    )
