"""
NIGHTPLAN Condition Evaluator Tests

Tests for time range, altitude, weather, moon phase and equipment
conditions, including the fail-open fallbacks.
"""

from datetime import datetime, timezone

import pytest

from nightplan.exceptions import ObservabilityError
from services.scheduling.conditions import ConditionEvaluator
from services.scheduling.models import (
    ConditionOperator,
    ConditionType,
    EquipmentStatus,
    EvaluationContext,
    ScheduleCondition,
    WeatherSnapshot,
)
from tests.fixtures.oracles import ConstantOracle, FailingOracle, FixedClock, WindowOracle, make_target

UTC = timezone.utc


class StubMoonPhase:
    """Moon phase calculator with a fixed answer."""

    def __init__(self, value: float):
        self.value = value
        self.dates = []

    def phase(self, date):
        self.dates.append(date)
        return self.value


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def evaluator(constant_oracle, clock):
    return ConditionEvaluator(constant_oracle, moon_phase=StubMoonPhase(0.1), clock=clock)


@pytest.fixture
def sky_context(m31, location):
    return EvaluationContext(target=m31, location=location, date=datetime(2024, 1, 1, 22, 0, tzinfo=UTC))


def condition(condition_type, operator, value=None):
    return ScheduleCondition(type=condition_type, operator=operator, value=value)


# =============================================================================
# Time Range
# =============================================================================


class TestTimeRange:
    """time_range compares against the wall clock (20:00 UTC)."""

    def test_between_inside(self, evaluator):
        c = condition(
            ConditionType.TIME_RANGE,
            ConditionOperator.BETWEEN,
            {"start": "2024-01-01T19:00:00Z", "end": "2024-01-01T21:00:00Z"},
        )
        assert evaluator.evaluate(c, EvaluationContext()) is True

    def test_between_outside(self, evaluator):
        c = condition(
            ConditionType.TIME_RANGE,
            ConditionOperator.BETWEEN,
            {"start": "2024-01-01T21:00:00Z", "end": "2024-01-01T23:00:00Z"},
        )
        assert evaluator.evaluate(c, EvaluationContext()) is False

    def test_between_accepts_datetimes(self, evaluator):
        c = condition(
            ConditionType.TIME_RANGE,
            ConditionOperator.BETWEEN,
            {
                "start": datetime(2024, 1, 1, 20, 0, tzinfo=UTC),
                "end": datetime(2024, 1, 1, 20, 0, tzinfo=UTC),
            },
        )
        # Bounds are inclusive
        assert evaluator.evaluate(c, EvaluationContext()) is True

    def test_greater_than(self, evaluator):
        after = condition(ConditionType.TIME_RANGE, ConditionOperator.GT, "2024-01-01T19:59:00Z")
        before = condition(ConditionType.TIME_RANGE, ConditionOperator.GT, "2024-01-01T20:01:00Z")

        assert evaluator.evaluate(after, EvaluationContext()) is True
        assert evaluator.evaluate(before, EvaluationContext()) is False

    def test_less_than(self, evaluator):
        c = condition(ConditionType.TIME_RANGE, ConditionOperator.LT, "2024-01-01T20:01:00Z")
        assert evaluator.evaluate(c, EvaluationContext()) is True

    def test_follows_clock(self, constant_oracle):
        """Evaluation reads the injected clock each time."""
        clock = FixedClock(datetime(2024, 1, 1, 20, 0, tzinfo=UTC))
        evaluator = ConditionEvaluator(constant_oracle, clock=clock)
        c = condition(ConditionType.TIME_RANGE, ConditionOperator.LT, "2024-01-01T21:00:00Z")

        assert evaluator.evaluate(c, EvaluationContext()) is True
        clock.advance(hours=2)
        assert evaluator.evaluate(c, EvaluationContext()) is False

    def test_malformed_value_passes(self, evaluator):
        missing_end = condition(
            ConditionType.TIME_RANGE, ConditionOperator.BETWEEN, {"start": "2024-01-01T19:00:00Z"}
        )
        garbage = condition(ConditionType.TIME_RANGE, ConditionOperator.GT, "not a date")
        wrong_type = condition(ConditionType.TIME_RANGE, ConditionOperator.LT, 42)

        assert evaluator.evaluate(missing_end, EvaluationContext()) is True
        assert evaluator.evaluate(garbage, EvaluationContext()) is True
        assert evaluator.evaluate(wrong_type, EvaluationContext()) is True

    def test_unsupported_operator_passes(self, evaluator):
        c = condition(ConditionType.TIME_RANGE, ConditionOperator.GE, "2030-01-01T00:00:00Z")
        assert evaluator.evaluate(c, EvaluationContext()) is True


# =============================================================================
# Altitude
# =============================================================================


class TestAltitude:
    """altitude queries the oracle for the context target."""

    def test_above_threshold(self, evaluator, sky_context):
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, 30)
        assert evaluator.evaluate(c, sky_context) is True

    def test_below_threshold(self, evaluator, sky_context):
        c = condition(ConditionType.ALTITUDE, ConditionOperator.LT, 30)
        assert evaluator.evaluate(c, sky_context) is False

    def test_inclusive_operators(self, evaluator, sky_context):
        assert evaluator.evaluate(condition(ConditionType.ALTITUDE, ConditionOperator.GE, 60), sky_context)
        assert evaluator.evaluate(condition(ConditionType.ALTITUDE, ConditionOperator.LE, 60), sky_context)

    def test_missing_target_passes_without_oracle_call(self, location):
        evaluator = ConditionEvaluator(FailingOracle())
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, 30)

        assert evaluator.evaluate(c, EvaluationContext(location=location)) is True
        assert evaluator.evaluate(c, EvaluationContext(target=make_target())) is True

    def test_unknown_altitude_is_zero(self, sky_context):
        evaluator = ConditionEvaluator(ConstantOracle(altitude=None, airmass=None))

        assert evaluator.evaluate(condition(ConditionType.ALTITUDE, ConditionOperator.GT, 30), sky_context) is False
        assert evaluator.evaluate(condition(ConditionType.ALTITUDE, ConditionOperator.LT, 30), sky_context) is True

    def test_uses_context_date(self, m31, location):
        oracle = WindowOracle({
            "M31": [(datetime(2024, 1, 1, 22, 0, tzinfo=UTC), datetime(2024, 1, 1, 23, 0, tzinfo=UTC))],
        })
        evaluator = ConditionEvaluator(oracle, clock=FixedClock())
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, 30)

        inside = EvaluationContext(target=m31, location=location, date=datetime(2024, 1, 1, 22, 30, tzinfo=UTC))
        no_date = EvaluationContext(target=m31, location=location)

        assert evaluator.evaluate(c, inside) is True
        # Falls back to the clock (20:00), outside the window
        assert evaluator.evaluate(c, no_date) is False

    def test_between_operator_passes(self, evaluator, sky_context):
        c = condition(ConditionType.ALTITUDE, ConditionOperator.BETWEEN, 80)
        assert evaluator.evaluate(c, sky_context) is True

    def test_non_numeric_value_passes(self, evaluator, sky_context):
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, "high")
        assert evaluator.evaluate(c, sky_context) is True

    def test_oracle_failure_raises(self, sky_context):
        evaluator = ConditionEvaluator(FailingOracle())
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, 30)

        with pytest.raises(ObservabilityError):
            evaluator.evaluate(c, sky_context)


# =============================================================================
# Weather
# =============================================================================


class TestWeather:
    """weather passes when the reading is at or under the threshold."""

    def test_no_weather_passes(self, evaluator):
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "cloud_cover", "threshold": 30})
        assert evaluator.evaluate(c, EvaluationContext()) is True

    def test_under_threshold(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(cloud_cover=20.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "cloud_cover", "threshold": 30})
        assert evaluator.evaluate(c, context) is True

    def test_at_threshold(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(wind_speed=25.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "wind_speed", "threshold": 25})
        assert evaluator.evaluate(c, context) is True

    def test_over_threshold(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(humidity=90.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "humidity", "threshold": 80})
        assert evaluator.evaluate(c, context) is False

    def test_operator_ignored(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(cloud_cover=20.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.GT, {"parameter": "cloud_cover", "threshold": 30})
        assert evaluator.evaluate(c, context) is True

    def test_unsupported_parameter_passes(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(temperature=-40.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "temperature", "threshold": -50})
        assert evaluator.evaluate(c, context) is True

    def test_missing_reading_passes(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(humidity=50.0))
        c = condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "cloud_cover", "threshold": 10})
        assert evaluator.evaluate(c, context) is True

    def test_malformed_value_passes(self, evaluator):
        context = EvaluationContext(weather=WeatherSnapshot(cloud_cover=99.0))

        assert evaluator.evaluate(condition(ConditionType.WEATHER, ConditionOperator.LT, 30), context) is True
        assert evaluator.evaluate(
            condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "cloud_cover"}), context
        ) is True


# =============================================================================
# Moon Phase
# =============================================================================


class TestMoonPhase:
    """moon_phase compares the phase fraction."""

    def test_less_than(self, evaluator):
        assert evaluator.evaluate(
            condition(ConditionType.MOON_PHASE, ConditionOperator.LT, 0.25), EvaluationContext()
        ) is True

    def test_greater_than(self, evaluator):
        assert evaluator.evaluate(
            condition(ConditionType.MOON_PHASE, ConditionOperator.GT, 0.25), EvaluationContext()
        ) is False

    def test_other_operators_pass(self, evaluator):
        for operator in (ConditionOperator.GE, ConditionOperator.LE, ConditionOperator.BETWEEN):
            assert evaluator.evaluate(
                condition(ConditionType.MOON_PHASE, operator, 0.9), EvaluationContext()
            ) is True

    def test_uses_context_date(self, constant_oracle, clock):
        moon = StubMoonPhase(0.5)
        evaluator = ConditionEvaluator(constant_oracle, moon_phase=moon, clock=clock)
        when = datetime(2024, 1, 25, 3, 0, tzinfo=UTC)

        evaluator.evaluate(condition(ConditionType.MOON_PHASE, ConditionOperator.LT, 0.3), EvaluationContext(date=when))
        evaluator.evaluate(condition(ConditionType.MOON_PHASE, ConditionOperator.LT, 0.3), EvaluationContext())

        assert moon.dates == [when, clock.now]

    def test_default_calculator_new_moon(self, constant_oracle):
        """Default calculator sees the 2024-01-11 new moon as dark."""
        evaluator = ConditionEvaluator(constant_oracle)
        context = EvaluationContext(date=datetime(2024, 1, 11, 12, 0, tzinfo=UTC))

        assert evaluator.evaluate(condition(ConditionType.MOON_PHASE, ConditionOperator.LT, 0.1), context) is True


# =============================================================================
# Equipment
# =============================================================================


class TestEquipment:
    """equipment_status requires a ready report with no errors."""

    def test_no_report_passes(self, evaluator):
        c = condition(ConditionType.EQUIPMENT_STATUS, ConditionOperator.GE)
        assert evaluator.evaluate(c, EvaluationContext()) is True

    def test_ready(self, evaluator):
        context = EvaluationContext(equipment=EquipmentStatus(status="ready"))
        assert evaluator.evaluate(condition(ConditionType.EQUIPMENT_STATUS, ConditionOperator.GE), context) is True

    def test_not_ready(self, evaluator):
        context = EvaluationContext(equipment=EquipmentStatus(status="busy"))
        assert evaluator.evaluate(condition(ConditionType.EQUIPMENT_STATUS, ConditionOperator.GE), context) is False

    def test_ready_with_errors(self, evaluator):
        context = EvaluationContext(equipment=EquipmentStatus(status="ready", errors=("camera timeout",)))
        assert evaluator.evaluate(condition(ConditionType.EQUIPMENT_STATUS, ConditionOperator.GE), context) is False


# =============================================================================
# Aggregation
# =============================================================================


class TestEvaluateAll:
    """evaluate_all is a conjunction."""

    def test_empty_is_true(self, evaluator):
        assert evaluator.evaluate_all([], EvaluationContext()) is True

    def test_any_failure_fails(self, evaluator):
        context = EvaluationContext(
            weather=WeatherSnapshot(cloud_cover=50.0),
            equipment=EquipmentStatus(status="ready"),
        )
        conditions = [
            condition(ConditionType.EQUIPMENT_STATUS, ConditionOperator.GE),
            condition(ConditionType.WEATHER, ConditionOperator.LT, {"parameter": "cloud_cover", "threshold": 30}),
        ]

        assert evaluator.evaluate_all(conditions, context) is False
        assert evaluator.evaluate_all(conditions[:1], context) is True

    def test_repeatable(self, evaluator, sky_context):
        """Same condition and context give the same answer."""
        c = condition(ConditionType.ALTITUDE, ConditionOperator.GT, 45)
        results = {evaluator.evaluate(c, sky_context) for _ in range(5)}
        assert results == {True}
