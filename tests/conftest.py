"""
Pytest Fixtures for NIGHTPLAN Testing.

Fixtures defined here are available to every test module:

    def test_place(night_options, constant_oracle):
        scheduler = ObservationScheduler(constant_oracle)
        result = scheduler.schedule_sequences(..., night_options)
"""

from datetime import datetime, timezone

import pytest

from services.scheduling.models import (
    Location,
    SchedulingConstraints,
    SchedulingOptions,
)
from tests.fixtures.oracles import ConstantOracle, FixedClock, make_target


# =============================================================================
# Site and Window
# =============================================================================

@pytest.fixture
def location() -> Location:
    """Observer site used throughout the tests."""
    return Location(latitude=38.9, longitude=-117.4)


@pytest.fixture
def night_start() -> datetime:
    return datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def night_end() -> datetime:
    return datetime(2024, 1, 2, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def night_options(location, night_start, night_end) -> SchedulingOptions:
    """Ten-hour night with default altitude/airmass limits (30 deg, 2.0)."""
    return SchedulingOptions(
        start_date=night_start,
        end_date=night_end,
        location=location,
        constraints=SchedulingConstraints(min_altitude=30.0, max_airmass=2.0),
    )


# =============================================================================
# Oracles and Clocks
# =============================================================================

@pytest.fixture
def constant_oracle() -> ConstantOracle:
    """Target always at altitude 60 deg, airmass 1.2."""
    return ConstantOracle(altitude=60.0, airmass=1.2)


@pytest.fixture
def low_oracle() -> ConstantOracle:
    """Target always below the horizon limit."""
    return ConstantOracle(altitude=10.0, airmass=5.6)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def m31():
    return make_target("M31")
