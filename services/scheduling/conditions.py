"""
NIGHTPLAN Condition Evaluator

Evaluates rule conditions (time range, altitude, weather, moon phase,
equipment status) against a runtime context.

Fail-open behaviour: when the context lacks the data a condition needs
(no target or location, no weather, no equipment report), when a value is
malformed, or when the operator does not apply to the condition type, the
condition evaluates to True. This includes safety-relevant conditions such
as weather and equipment. Callers that need fail-closed behaviour must make
sure the context is complete before evaluating.

Evaluation is pure apart from reading the wall clock, which is injectable.
"""

from typing import Any, Callable, Iterable, Optional

from nightplan.logging_config import get_logger
from nightplan.types import Clock, ensure_utc, parse_instant, utc_now

from .models import (
    ConditionOperator,
    ConditionType,
    EvaluationContext,
    ScheduleCondition,
)
from .moon import MoonPhaseCalculator, SimplifiedMoonPhase
from .observability import ObservabilityOracle, observe

logger = get_logger(__name__)

WEATHER_PARAMETERS = ("cloud_cover", "wind_speed", "humidity")

_NUMERIC_COMPARISONS: dict[ConditionOperator, Callable[[float, float], bool]] = {
    ConditionOperator.LT: lambda a, b: a < b,
    ConditionOperator.GT: lambda a, b: a > b,
    ConditionOperator.GE: lambda a, b: a >= b,
    ConditionOperator.LE: lambda a, b: a <= b,
}


class ConditionEvaluator:
    """Maps (condition, context) to a boolean."""

    def __init__(
        self,
        oracle: ObservabilityOracle,
        moon_phase: Optional[MoonPhaseCalculator] = None,
        clock: Clock = utc_now,
    ):
        """
        Args:
            oracle: Observability oracle used by altitude conditions
            moon_phase: Lunar phase calculator (default: SimplifiedMoonPhase)
            clock: Wall clock for time_range conditions and default dates
        """
        self._oracle = oracle
        self._moon_phase = moon_phase or SimplifiedMoonPhase()
        self._clock = clock

        self._handlers: dict[ConditionType, Callable[[ScheduleCondition, EvaluationContext], bool]] = {
            ConditionType.TIME_RANGE: self._evaluate_time_range,
            ConditionType.ALTITUDE: self._evaluate_altitude,
            ConditionType.WEATHER: self._evaluate_weather,
            ConditionType.MOON_PHASE: self._evaluate_moon_phase,
            ConditionType.EQUIPMENT_STATUS: self._evaluate_equipment,
        }

    def evaluate(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        """Evaluate one condition; unknown condition types pass."""
        handler = self._handlers.get(condition.type)
        if handler is None:
            return True
        return handler(condition, context)

    def evaluate_all(
        self,
        conditions: Iterable[ScheduleCondition],
        context: EvaluationContext,
    ) -> bool:
        """True when every condition passes (vacuously true when empty)."""
        return all(self.evaluate(c, context) for c in conditions)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _evaluate_time_range(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        # Wall clock, not the slot time being considered
        now = ensure_utc(self._clock())
        try:
            if condition.operator is ConditionOperator.BETWEEN:
                start = parse_instant(condition.value["start"])
                end = parse_instant(condition.value["end"])
                return start <= now <= end
            if condition.operator is ConditionOperator.GT:
                return now > parse_instant(condition.value)
            if condition.operator is ConditionOperator.LT:
                return now < parse_instant(condition.value)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Malformed time_range value {condition.value!r}, passing: {e}")
            return True
        return True

    def _evaluate_altitude(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        if context.target is None or context.location is None:
            logger.debug("Altitude condition without target/location, passing")
            return True

        when = context.date or self._clock()
        data = observe(self._oracle, context.target, context.location, when)
        altitude = data.altitude if data.altitude is not None else 0.0

        return self._compare(condition.operator, altitude, condition.value)

    def _evaluate_weather(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        if context.weather is None:
            return True

        value = condition.value if isinstance(condition.value, dict) else {}
        parameter = value.get("parameter")
        threshold = value.get("threshold")
        if parameter not in WEATHER_PARAMETERS or threshold is None:
            return True

        reading = context.weather.reading(parameter)
        if reading is None:
            logger.debug(f"No {parameter} reading, passing weather condition")
            return True

        return reading <= threshold

    def _evaluate_moon_phase(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        if condition.operator not in (ConditionOperator.LT, ConditionOperator.GT):
            return True

        when = context.date or self._clock()
        phase = self._moon_phase.phase(when)
        return self._compare(condition.operator, phase, condition.value)

    def _evaluate_equipment(self, condition: ScheduleCondition, context: EvaluationContext) -> bool:
        if context.equipment is None:
            return True
        return context.equipment.is_ready

    @staticmethod
    def _compare(operator: ConditionOperator, actual: float, expected: Any) -> bool:
        comparison = _NUMERIC_COMPARISONS.get(operator)
        if comparison is None:
            return True
        try:
            return comparison(actual, float(expected))
        except (TypeError, ValueError):
            return True
