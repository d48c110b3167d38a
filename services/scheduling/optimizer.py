"""
NIGHTPLAN Schedule Optimizers

Post-processing hook for a finished schedule. The scheduler calls whatever
ScheduleOptimizer it was built with, so a local-search or constraint-solver
implementation can be dropped in without touching the orchestrator.
"""

from typing import Protocol, Sequence as SequenceType

from .models import ScheduledSequence, SchedulingOptions


class ScheduleOptimizer(Protocol):
    """Reworks a schedule; must not mutate its input list."""

    def optimize(
        self,
        scheduled: SequenceType[ScheduledSequence],
        options: SchedulingOptions,
    ) -> list[ScheduledSequence]:
        ...


class PriorityOrderOptimizer:
    """Re-sorts by descending priority. Times are left untouched."""

    def optimize(
        self,
        scheduled: SequenceType[ScheduledSequence],
        options: SchedulingOptions,
    ) -> list[ScheduledSequence]:
        return sorted(scheduled, key=lambda s: s.priority, reverse=True)
