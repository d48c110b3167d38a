"""
NIGHTPLAN Scheduling Service

Places imaging sequences on the night's timeline:
- Priority ranking (difficulty, visibility, duration)
- Earliest-fit time-slot search against an observability oracle
- Conflict detection and result statistics
- Schedule rules with time/altitude/weather/moon/equipment conditions
- Real-time tracking of sequence status
"""

from .models import (
    ActionType,
    ConditionOperator,
    ConditionType,
    ConflictSeverity,
    ConflictType,
    Difficulty,
    EquipmentStatus,
    EvaluationContext,
    Location,
    ObservabilityData,
    RuleType,
    ScheduleAction,
    ScheduleCondition,
    ScheduledSequence,
    ScheduledSequenceMetadata,
    ScheduleRule,
    SchedulingConflict,
    SchedulingConstraints,
    SchedulingOptions,
    SchedulingResult,
    SchedulingStatistics,
    Sequence,
    SequenceMetadata,
    SequenceStatus,
    Target,
    WeatherSnapshot,
)

from .observability import (
    ObservabilityOracle,
    HourAngleObservability,
    observe,
)

from .moon import (
    MoonPhaseCalculator,
    SimplifiedMoonPhase,
    SkyfieldMoonPhase,
)

from .conditions import ConditionEvaluator
from .ranking import PriorityRanker, PrioritizedSequences, RankedSequence
from .slot_search import TimeSlot, TimeSlotSearch, VisibilitySampling, is_visible
from .conflicts import ConflictDetector
from .optimizer import ScheduleOptimizer, PriorityOrderOptimizer
from .rules import RuleStore
from .tracker import ScheduleTracker, ALLOWED_TRANSITIONS

from .scheduler import (
    ObservationScheduler,
    create_scheduler,
    options_from_config,
)

__all__ = [
    # Scheduler
    "ObservationScheduler",
    "create_scheduler",
    "options_from_config",
    # Components
    "ConditionEvaluator",
    "PriorityRanker",
    "PrioritizedSequences",
    "RankedSequence",
    "TimeSlot",
    "TimeSlotSearch",
    "VisibilitySampling",
    "is_visible",
    "ConflictDetector",
    "ScheduleOptimizer",
    "PriorityOrderOptimizer",
    "RuleStore",
    "ScheduleTracker",
    "ALLOWED_TRANSITIONS",
    # Oracles
    "ObservabilityOracle",
    "HourAngleObservability",
    "observe",
    "MoonPhaseCalculator",
    "SimplifiedMoonPhase",
    "SkyfieldMoonPhase",
    # Models
    "ActionType",
    "ConditionOperator",
    "ConditionType",
    "ConflictSeverity",
    "ConflictType",
    "Difficulty",
    "EquipmentStatus",
    "EvaluationContext",
    "Location",
    "ObservabilityData",
    "RuleType",
    "ScheduleAction",
    "ScheduleCondition",
    "ScheduledSequence",
    "ScheduledSequenceMetadata",
    "ScheduleRule",
    "SchedulingConflict",
    "SchedulingConstraints",
    "SchedulingOptions",
    "SchedulingResult",
    "SchedulingStatistics",
    "Sequence",
    "SequenceMetadata",
    "SequenceStatus",
    "Target",
    "WeatherSnapshot",
]
