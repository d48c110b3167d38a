"""
NIGHTPLAN Scheduling Data Model

Records shared by the scheduling components: rules and their conditions,
sequences and targets handed in by the caller, scheduled sequences produced
by the orchestrator, and the result envelope returned from a run.

All timestamps are aware UTC datetimes; durations are seconds.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from nightplan.types import Degrees, Hours, JsonDict, Seconds, ensure_utc, utc_now


def new_id() -> str:
    """Short random identifier for rules and placements."""
    return str(uuid.uuid4())[:8]


# =============================================================================
# Enums
# =============================================================================


class ConditionType(Enum):
    """Kinds of rule condition understood by the evaluator."""

    TIME_RANGE = "time_range"
    ALTITUDE = "altitude"
    WEATHER = "weather"
    MOON_PHASE = "moon_phase"
    EQUIPMENT_STATUS = "equipment_status"


class ConditionOperator(Enum):
    """Comparison operators for conditions."""

    LT = "<"
    GT = ">"
    GE = ">="
    LE = "<="
    BETWEEN = "between"


class RuleType(Enum):
    """How a rule is triggered."""

    TIME = "time"
    CONDITION = "condition"
    EVENT = "event"


class ActionType(Enum):
    """What a rule does when it fires."""

    START_SEQUENCE = "start_sequence"
    PAUSE_SEQUENCE = "pause_sequence"
    STOP_SEQUENCE = "stop_sequence"
    CHANGE_TARGET = "change_target"
    NOTIFY = "notify"


class SequenceStatus(Enum):
    """Lifecycle of a scheduled sequence."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            SequenceStatus.COMPLETED,
            SequenceStatus.FAILED,
            SequenceStatus.CANCELLED,
        )


class ConflictType(Enum):
    """Category of scheduling problem."""

    TIME_OVERLAP = "time_overlap"
    EQUIPMENT_CONFLICT = "equipment_conflict"
    WEATHER_CONSTRAINT = "weather_constraint"
    TARGET_VISIBILITY = "target_visibility"


class ConflictSeverity(Enum):
    """Only HIGH forces a run to be unsuccessful."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Difficulty(Enum):
    """Sequence difficulty, used by the priority ranker."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class ScheduleCondition:
    """A single test evaluated against the runtime context.

    ``value`` depends on ``type``:
        time_range  {"start": ..., "end": ...} for between, else one instant
        altitude    degrees
        weather     {"parameter": "cloud_cover", "threshold": 30}
        moon_phase  phase fraction 0-1
        equipment_status  unused
    """

    type: ConditionType
    operator: ConditionOperator
    value: Any = None
    unit: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        value = self.value
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, dict):
            value = {
                k: v.isoformat() if isinstance(v, datetime) else v
                for k, v in value.items()
            }
        return {
            "type": self.type.value,
            "operator": self.operator.value,
            "value": value,
            "unit": self.unit,
        }


@dataclass(frozen=True)
class ScheduleAction:
    """Action attached to a rule."""

    type: ActionType
    parameters: dict[str, Any] = field(default_factory=dict)
    delay: Optional[Seconds] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "parameters": dict(self.parameters),
            "delay": self.delay,
        }


@dataclass
class ScheduleRule:
    """A named set of conditions and actions held by the RuleStore."""

    id: str
    name: str
    conditions: list[ScheduleCondition] = field(default_factory=list)
    actions: list[ScheduleAction] = field(default_factory=list)
    priority: int = 0
    enabled: bool = True
    rule_type: RuleType = RuleType.CONDITION
    created: datetime = field(default_factory=utc_now)
    modified: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
            "priority": self.priority,
            "enabled": self.enabled,
            "rule_type": self.rule_type.value,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
        }


# =============================================================================
# Scheduling Inputs
# =============================================================================


@dataclass(frozen=True)
class Location:
    """Observer position on Earth."""

    latitude: Degrees
    longitude: Degrees

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class Target:
    """Imaging target. Owned by the caller; only read by the scheduler."""

    id: str
    name: str
    ra_hours: Hours
    dec_degrees: Degrees
    object_type: Optional[str] = None


@dataclass
class SequenceMetadata:
    """Descriptive data about an imaging sequence."""

    difficulty: Optional[Difficulty] = None
    equipment: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class Sequence:
    """An imaging sequence to be placed on the timeline.

    ``target`` is the id of a Target, or None when the sequence has not
    been pointed at anything yet.
    """

    id: str
    name: str
    target: Optional[str]
    estimated_duration: Seconds
    metadata: SequenceMetadata = field(default_factory=SequenceMetadata)

    def __post_init__(self) -> None:
        if self.estimated_duration < 0:
            raise ValueError(
                f"estimated_duration must be non-negative, got {self.estimated_duration}"
            )

    @property
    def duration(self) -> timedelta:
        return timedelta(seconds=self.estimated_duration)


@dataclass(frozen=True)
class SchedulingConstraints:
    """Visibility and environment limits applied to every placement."""

    min_altitude: Degrees = 30.0
    max_airmass: float = 2.0
    moon_separation: Degrees = 0.0
    weather_requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class SchedulingOptions:
    """Immutable inputs for one scheduling run."""

    start_date: datetime
    end_date: datetime
    location: Location
    constraints: SchedulingConstraints = field(default_factory=SchedulingConstraints)

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "start_date", ensure_utc(self.start_date))
        object.__setattr__(self, "end_date", ensure_utc(self.end_date))
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")

    @property
    def window_seconds(self) -> Seconds:
        return (self.end_date - self.start_date).total_seconds()


# =============================================================================
# External Inputs
# =============================================================================


@dataclass(frozen=True)
class ObservabilityData:
    """Oracle output. A None field means the value is unknown."""

    altitude: Optional[Degrees] = None
    azimuth: Optional[Degrees] = None
    airmass: Optional[float] = None


@dataclass(frozen=True)
class WeatherSnapshot:
    """Weather readings supplied by the caller."""

    cloud_cover: Optional[float] = None  # percent
    wind_speed: Optional[float] = None
    humidity: Optional[float] = None  # percent
    temperature: Optional[float] = None

    def reading(self, parameter: str) -> Optional[float]:
        """Look up a reading by condition parameter name."""
        return {
            "cloud_cover": self.cloud_cover,
            "wind_speed": self.wind_speed,
            "humidity": self.humidity,
            "temperature": self.temperature,
        }.get(parameter)


@dataclass(frozen=True)
class EquipmentStatus:
    """Equipment readiness as reported by the device layer."""

    status: str
    errors: tuple[str, ...] = ()

    @property
    def is_ready(self) -> bool:
        return self.status == "ready" and not self.errors


@dataclass(frozen=True)
class EvaluationContext:
    """Everything a condition may look at. Missing pieces are permissive."""

    target: Optional[Target] = None
    location: Optional[Location] = None
    date: Optional[datetime] = None
    weather: Optional[WeatherSnapshot] = None
    equipment: Optional[EquipmentStatus] = None


# =============================================================================
# Scheduling Outputs
# =============================================================================


@dataclass
class ScheduledSequenceMetadata:
    """Requirements carried from the sequence onto its placement."""

    estimated_duration: Seconds
    weather_requirements: list[str] = field(default_factory=list)
    equipment_requirements: list[str] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class ScheduledSequence:
    """A sequence placed on the timeline."""

    id: str
    sequence_id: str
    target_id: Optional[str]
    scheduled_start: datetime
    scheduled_end: datetime
    metadata: ScheduledSequenceMetadata
    status: SequenceStatus = SequenceStatus.PENDING
    priority: float = 0.0
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    rules: list[str] = field(default_factory=list)
    conditions: list[ScheduleCondition] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.scheduled_start >= self.scheduled_end:
            raise ValueError("scheduled_start must be before scheduled_end")

    def overlaps(self, other: "ScheduledSequence") -> bool:
        """Strict half-open overlap; touching windows do not overlap."""
        return (
            self.scheduled_start < other.scheduled_end
            and other.scheduled_start < self.scheduled_end
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "sequence_id": self.sequence_id,
            "target_id": self.target_id,
            "scheduled_start": self.scheduled_start.isoformat(),
            "scheduled_end": self.scheduled_end.isoformat(),
            "actual_start": self.actual_start.isoformat() if self.actual_start else None,
            "actual_end": self.actual_end.isoformat() if self.actual_end else None,
            "status": self.status.value,
            "priority": self.priority,
            "rules": list(self.rules),
            "conditions": [c.to_dict() for c in self.conditions],
            "metadata": {
                "estimated_duration": self.metadata.estimated_duration,
                "weather_requirements": list(self.metadata.weather_requirements),
                "equipment_requirements": list(self.metadata.equipment_requirements),
                "notes": self.metadata.notes,
            },
        }


@dataclass
class SchedulingConflict:
    """A problem found while scheduling."""

    type: ConflictType
    sequences: list[str]
    description: str
    severity: ConflictSeverity
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "sequences": list(self.sequences),
            "description": self.description,
            "severity": self.severity.value,
            "suggestions": list(self.suggestions),
        }


@dataclass
class SchedulingStatistics:
    """Aggregate figures for a run."""

    total_time: Seconds = 0.0
    utilization_rate: float = 0.0
    sequence_count: int = 0
    target_count: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_time": self.total_time,
            "utilization_rate": self.utilization_rate,
            "sequence_count": self.sequence_count,
            "target_count": self.target_count,
        }


@dataclass
class SchedulingResult:
    """Outcome of ``schedule_sequences``."""

    scheduled_sequences: list[ScheduledSequence] = field(default_factory=list)
    conflicts: list[SchedulingConflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statistics: SchedulingStatistics = field(default_factory=SchedulingStatistics)

    @property
    def success(self) -> bool:
        """False iff any conflict is high severity."""
        return not any(c.severity is ConflictSeverity.HIGH for c in self.conflicts)

    def to_dict(self) -> JsonDict:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "scheduled_sequences": [s.to_dict() for s in self.scheduled_sequences],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "warnings": list(self.warnings),
            "statistics": self.statistics.to_dict(),
        }
