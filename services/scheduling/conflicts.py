"""
NIGHTPLAN Conflict Detection

The orchestrator places sequences on a single forward-moving timeline, so
overlaps should never be produced. ConflictDetector re-checks the finished
schedule anyway; any overlap it finds is high severity and marks the run
unsuccessful.
"""

from typing import Sequence as SequenceType

from nightplan.logging_config import get_logger

from .models import (
    ConflictSeverity,
    ConflictType,
    ScheduledSequence,
    SchedulingConflict,
    Sequence,
)

logger = get_logger(__name__)

OVERLAP_SUGGESTIONS = ["Adjust sequence timing", "Reduce sequence duration"]
VISIBILITY_SUGGESTIONS = ["Adjust time constraints", "Lower altitude requirements"]


class ConflictDetector:
    """Builds SchedulingConflict records."""

    def detect(self, scheduled: SequenceType[ScheduledSequence]) -> list[SchedulingConflict]:
        """Pairwise overlap scan over placed sequences."""
        conflicts = []

        for i, first in enumerate(scheduled):
            for second in scheduled[i + 1:]:
                if first.overlaps(second):
                    logger.error(
                        f"Overlapping placements {first.sequence_id} and {second.sequence_id}"
                    )
                    conflicts.append(
                        SchedulingConflict(
                            type=ConflictType.TIME_OVERLAP,
                            sequences=[first.sequence_id, second.sequence_id],
                            description="Sequences have overlapping time slots",
                            severity=ConflictSeverity.HIGH,
                            suggestions=list(OVERLAP_SUGGESTIONS),
                        )
                    )

        return conflicts

    @staticmethod
    def unplaceable(sequence: Sequence) -> SchedulingConflict:
        """Conflict for a sequence with no visible window in range."""
        return SchedulingConflict(
            type=ConflictType.TARGET_VISIBILITY,
            sequences=[sequence.id],
            description=f"No suitable time slot found for {sequence.name}",
            severity=ConflictSeverity.MEDIUM,
            suggestions=list(VISIBILITY_SUGGESTIONS),
        )
