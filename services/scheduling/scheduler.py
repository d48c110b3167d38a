"""
NIGHTPLAN Observation Scheduler

Greedy single-timeline scheduler for imaging sequences.

A run:
1. Ranks sequences by priority (difficulty, visibility at run start,
   duration penalty); sequences without a known target become warnings.
2. Walks the ranked list with one time cursor starting at the window
   start. Each sequence gets the earliest visible slot at or after the
   cursor; the cursor then moves to the end of that slot. Sequences with
   no visible slot become target_visibility conflicts and leave the cursor
   where it was.
3. Re-checks the placements for overlaps.
4. Computes utilisation statistics.
5. Hands the placements to the tracker, replacing any plan still pending
   from an earlier run.

Infeasibility never raises; inspect ``SchedulingResult.success`` and
``conflicts``. A hard failure of the observability oracle raises
ObservabilityError and aborts the run.

The scheduler assumes a single telescope: placements never run in
parallel.
"""

from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from nightplan.config import NightplanConfig, SchedulerConfig
from nightplan.logging_config import get_logger
from nightplan.types import Clock, utc_now

from .conditions import ConditionEvaluator
from .conflicts import ConflictDetector
from .models import (
    EvaluationContext,
    Location,
    RuleType,
    ScheduleAction,
    ScheduleCondition,
    ScheduledSequence,
    ScheduledSequenceMetadata,
    ScheduleRule,
    SchedulingConstraints,
    SchedulingOptions,
    SchedulingResult,
    SchedulingStatistics,
    Sequence,
    SequenceStatus,
    Target,
    new_id,
)
from .moon import MoonPhaseCalculator
from .observability import HourAngleObservability, ObservabilityOracle
from .optimizer import PriorityOrderOptimizer, ScheduleOptimizer
from .ranking import PriorityRanker
from .rules import RuleStore
from .slot_search import TimeSlotSearch, VisibilitySampling
from .tracker import ScheduleTracker

logger = get_logger(__name__)


class ObservationScheduler:
    """
    Places imaging sequences on the night's timeline.

    Also owns the rule store and the real-time tracker so callers have one
    object to talk to.
    """

    def __init__(
        self,
        oracle: ObservabilityOracle,
        config: Optional[SchedulerConfig] = None,
        moon_phase: Optional[MoonPhaseCalculator] = None,
        optimizer: Optional[ScheduleOptimizer] = None,
        rule_store: Optional[RuleStore] = None,
        tracker: Optional[ScheduleTracker] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize scheduler.

        Args:
            oracle: Observability oracle (altitude/airmass provider)
            config: Ranking and slot search tuning
            moon_phase: Lunar phase calculator for moon_phase conditions
            optimizer: Post-processing strategy for optimize_schedule
            rule_store: Rule registry (a new empty one by default)
            tracker: Tracker that receives placed sequences (new by default)
            clock: Wall clock for rules and tracking
        """
        self.config = config or SchedulerConfig()

        self.evaluator = ConditionEvaluator(oracle, moon_phase=moon_phase, clock=clock)
        self.ranker = PriorityRanker(oracle, self.config)
        self.slot_search = TimeSlotSearch(
            oracle,
            step=timedelta(minutes=self.config.slot_step_minutes),
            sampling=VisibilitySampling(self.config.visibility_sampling),
        )
        self.detector = ConflictDetector()
        self.optimizer: ScheduleOptimizer = optimizer or PriorityOrderOptimizer()
        self.rules = rule_store or RuleStore(clock=clock)
        self.tracker = tracker or ScheduleTracker(clock=clock)

    # -------------------------------------------------------------------------
    # Automatic scheduling
    # -------------------------------------------------------------------------

    def schedule_sequences(
        self,
        sequences: Iterable[Sequence],
        targets: Iterable[Target],
        options: SchedulingOptions,
    ) -> SchedulingResult:
        """
        Assign time windows to sequences.

        Args:
            sequences: Sequences to place
            targets: Targets the sequences refer to by id
            options: Window, site and visibility constraints

        Returns:
            SchedulingResult with placements, conflicts, warnings and statistics

        Raises:
            ObservabilityError: The observability oracle failed
        """
        sequences = list(sequences)
        logger.info(
            f"Scheduling {len(sequences)} sequence(s) between "
            f"{options.start_date.isoformat()} and {options.end_date.isoformat()}"
        )

        prioritized = self.ranker.prioritize(sequences, targets, options)
        result = SchedulingResult(warnings=list(prioritized.warnings))

        current_time = options.start_date

        for ranked in prioritized.ranked:
            sequence = ranked.sequence

            if sequence.duration <= timedelta(0):
                message = f"Sequence {sequence.name} has no estimated duration"
                logger.warning(message)
                result.warnings.append(message)
                continue

            slot = self.slot_search.find_slot(
                sequence,
                ranked.target,
                current_time,
                options.end_date,
                options,
            )

            if slot is None:
                logger.warning(f"No suitable time slot found for {sequence.name}")
                result.conflicts.append(self.detector.unplaceable(sequence))
                continue

            scheduled = ScheduledSequence(
                id=new_id(),
                sequence_id=sequence.id,
                target_id=ranked.target.id,
                scheduled_start=slot.start,
                scheduled_end=slot.end,
                status=SequenceStatus.PENDING,
                priority=ranked.score,
                metadata=ScheduledSequenceMetadata(
                    estimated_duration=sequence.estimated_duration,
                    weather_requirements=list(options.constraints.weather_requirements),
                    equipment_requirements=list(sequence.metadata.equipment),
                ),
            )
            result.scheduled_sequences.append(scheduled)
            current_time = slot.end

            logger.info(
                f"Placed {sequence.name} on {ranked.target.id} "
                f"{slot.start.isoformat()} - {slot.end.isoformat()} (priority {ranked.score})"
            )

        result.conflicts.extend(self.detector.detect(result.scheduled_sequences))
        result.statistics = self._statistics(result.scheduled_sequences, options)

        self.tracker.replace_schedule(result.scheduled_sequences)

        logger.info(
            f"Scheduling finished: {result.statistics.sequence_count} placed, "
            f"{len(result.conflicts)} conflict(s), {len(result.warnings)} warning(s), "
            f"utilization {result.statistics.utilization_rate:.1%}"
        )
        return result

    @staticmethod
    def _statistics(
        scheduled: list[ScheduledSequence],
        options: SchedulingOptions,
    ) -> SchedulingStatistics:
        total_time = sum(s.metadata.estimated_duration for s in scheduled)
        return SchedulingStatistics(
            total_time=total_time,
            utilization_rate=total_time / options.window_seconds,
            sequence_count=len(scheduled),
            target_count=len({s.target_id for s in scheduled}),
        )

    def optimize_schedule(
        self,
        scheduled: list[ScheduledSequence],
        options: SchedulingOptions,
    ) -> list[ScheduledSequence]:
        """Run the configured optimizer over a schedule."""
        return self.optimizer.optimize(scheduled, options)

    # -------------------------------------------------------------------------
    # Rule management
    # -------------------------------------------------------------------------

    def add_rule(
        self,
        name: str,
        conditions: Optional[Iterable[ScheduleCondition]] = None,
        actions: Optional[Iterable[ScheduleAction]] = None,
        priority: int = 0,
        enabled: bool = True,
        rule_type: RuleType = RuleType.CONDITION,
    ) -> ScheduleRule:
        return self.rules.add_rule(
            name,
            conditions=conditions,
            actions=actions,
            priority=priority,
            enabled=enabled,
            rule_type=rule_type,
        )

    def update_rule(self, rule_id: str, **updates: Any) -> Optional[ScheduleRule]:
        return self.rules.update_rule(rule_id, **updates)

    def delete_rule(self, rule_id: str) -> bool:
        return self.rules.delete_rule(rule_id)

    def get_rules(self) -> list[ScheduleRule]:
        return self.rules.get_rules()

    def evaluate_condition(
        self,
        condition: ScheduleCondition,
        context: EvaluationContext,
    ) -> bool:
        return self.evaluator.evaluate(condition, context)

    def active_rules(self, context: EvaluationContext) -> list[ScheduleRule]:
        """Enabled rules whose conditions hold in ``context``."""
        return self.rules.matching_rules(self.evaluator, context)

    # -------------------------------------------------------------------------
    # Real-time tracking
    # -------------------------------------------------------------------------

    def get_next_scheduled_sequence(
        self,
        now: Optional[datetime] = None,
    ) -> Optional[ScheduledSequence]:
        return self.tracker.get_next_scheduled_sequence(now)

    def update_scheduled_sequence_status(
        self,
        scheduled_id: str,
        status: SequenceStatus,
    ) -> Optional[ScheduledSequence]:
        return self.tracker.update_scheduled_sequence_status(scheduled_id, status)


# =============================================================================
# Factories
# =============================================================================


def options_from_config(
    config: NightplanConfig,
    start_date: datetime,
    end_date: datetime,
    location: Optional[Location] = None,
    weather_requirements: Iterable[str] = (),
) -> SchedulingOptions:
    """Build SchedulingOptions from the site and scheduler defaults."""
    return SchedulingOptions(
        start_date=start_date,
        end_date=end_date,
        location=location or config.site.to_location(),
        constraints=SchedulingConstraints(
            min_altitude=config.scheduler.default_min_altitude,
            max_airmass=config.scheduler.default_max_airmass,
            weather_requirements=tuple(weather_requirements),
        ),
    )


def create_scheduler(
    config: Optional[NightplanConfig] = None,
    oracle: Optional[ObservabilityOracle] = None,
    moon_phase: Optional[MoonPhaseCalculator] = None,
    optimizer: Optional[ScheduleOptimizer] = None,
) -> ObservationScheduler:
    """Create a scheduler with its own rule store and tracker.

    Without an oracle the reference HourAngleObservability model is used.
    """
    config = config or NightplanConfig()
    return ObservationScheduler(
        oracle=oracle or HourAngleObservability(),
        config=config.scheduler,
        moon_phase=moon_phase,
        optimizer=optimizer,
    )
