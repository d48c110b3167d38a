"""
NIGHTPLAN Test Fixtures Package.

Fake oracles and clocks so the scheduler can be tested without an
ephemeris or a real wall clock.

Usage:
    from tests.fixtures.oracles import ConstantOracle, make_sequence

    def test_place():
        scheduler = ObservationScheduler(ConstantOracle())
        ...
"""

from tests.fixtures.oracles import (
    ConstantOracle,
    FailingOracle,
    FixedClock,
    WindowOracle,
    make_sequence,
    make_target,
)

__all__ = [
    "ConstantOracle",
    "FailingOracle",
    "FixedClock",
    "WindowOracle",
    "make_sequence",
    "make_target",
]
