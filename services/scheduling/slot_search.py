"""
NIGHTPLAN Time-Slot Search

Finds the earliest window for one sequence by stepping forward through the
search range in fixed increments.

Visibility is sampled, not tracked continuously. With the default MIDPOINT
sampling a window is accepted when the target satisfies the altitude and
airmass limits at the window midpoint only; the target may be out of
limits near the edges of an accepted window. ENDPOINTS sampling also checks
the window start and end, at three times the oracle cost per probe.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from nightplan.logging_config import get_logger

from .models import ObservabilityData, Sequence, SchedulingConstraints, SchedulingOptions, Target
from .observability import ObservabilityOracle, observe

logger = get_logger(__name__)

DEFAULT_STEP = timedelta(minutes=15)


class VisibilitySampling(Enum):
    """Which instants of a candidate window are checked."""

    MIDPOINT = "midpoint"
    ENDPOINTS = "endpoints"  # start, midpoint and end


@dataclass(frozen=True)
class TimeSlot:
    """A candidate window ``[start, end]``."""

    start: datetime
    end: datetime

    @property
    def midpoint(self) -> datetime:
        return self.start + (self.end - self.start) / 2


def is_visible(data: ObservabilityData, constraints: SchedulingConstraints) -> bool:
    """Altitude and airmass within limits. Unknown values fail."""
    return (
        data.altitude is not None
        and data.altitude >= constraints.min_altitude
        and data.airmass is not None
        and data.airmass <= constraints.max_airmass
    )


class TimeSlotSearch:
    """Earliest-fit window search against the observability oracle."""

    def __init__(
        self,
        oracle: ObservabilityOracle,
        step: timedelta = DEFAULT_STEP,
        sampling: VisibilitySampling = VisibilitySampling.MIDPOINT,
    ):
        if step <= timedelta(0):
            raise ValueError("step must be positive")
        self._oracle = oracle
        self._step = step
        self._sampling = sampling

    def find_slot(
        self,
        sequence: Sequence,
        target: Target,
        search_start: datetime,
        search_end: datetime,
        options: SchedulingOptions,
    ) -> Optional[TimeSlot]:
        """Return the first window in range where the target is visible.

        Returns:
            TimeSlot, or None when no window fits before ``search_end``
        """
        duration = sequence.duration
        current = search_start
        probes = 0

        while current + duration <= search_end:
            slot = TimeSlot(current, current + duration)
            probes += 1
            if self._slot_is_visible(target, slot, options):
                logger.debug(
                    f"Slot for {sequence.name} found at {slot.start.isoformat()} "
                    f"after {probes} probe(s)"
                )
                return slot
            current += self._step

        logger.debug(f"No slot for {sequence.name} after {probes} probe(s)")
        return None

    def _sample_times(self, slot: TimeSlot) -> list[datetime]:
        if self._sampling is VisibilitySampling.ENDPOINTS:
            return [slot.start, slot.midpoint, slot.end]
        return [slot.midpoint]

    def _slot_is_visible(self, target: Target, slot: TimeSlot, options: SchedulingOptions) -> bool:
        for when in self._sample_times(slot):
            data = observe(self._oracle, target, options.location, when)
            if not is_visible(data, options.constraints):
                return False
        return True
