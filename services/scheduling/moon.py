"""
NIGHTPLAN Moon Phase Calculators

Moon phase is expressed as a fraction of the synodic month in [0, 1):
0.0 new moon, 0.25 first quarter, 0.5 full moon, 0.75 last quarter.

SimplifiedMoonPhase is the default used by the condition evaluator. It is a
day-resolution Julian-day approximation, good to about a day, and makes no
precision guarantee. SkyfieldMoonPhase gives the ephemeris-accurate value
when a JPL ephemeris is available.
"""

from datetime import datetime
from typing import Any, Optional, Protocol

from skyfield import almanac
from skyfield.api import load

from nightplan.types import ensure_utc

SYNODIC_MONTH_DAYS = 29.5305882

# Day count offset placing a known new moon at phase zero
_EPOCH_OFFSET_DAYS = 694039.09


class MoonPhaseCalculator(Protocol):
    """Returns the moon phase fraction for an instant."""

    def phase(self, date: datetime) -> float:
        ...


class SimplifiedMoonPhase:
    """Julian-day approximation of the lunar phase."""

    def phase(self, date: datetime) -> float:
        date = ensure_utc(date)
        year = date.year
        month = date.month
        day = date.day

        # Count January and February as months 13 and 14 of the prior year
        if month < 3:
            year -= 1
            month += 12
        month += 1

        days = 365.25 * year + 30.6 * month + day - _EPOCH_OFFSET_DAYS
        return (days / SYNODIC_MONTH_DAYS) % 1.0


class SkyfieldMoonPhase:
    """Ephemeris-backed lunar phase using Skyfield's almanac.

    The ephemeris is loaded on first use unless one is injected. Loading
    downloads ``de421.bsp`` into the working directory if it is not there.
    """

    def __init__(
        self,
        ephemeris: Optional[Any] = None,
        timescale: Optional[Any] = None,
        ephemeris_file: str = "de421.bsp",
    ):
        self._eph = ephemeris
        self._ts = timescale
        self._ephemeris_file = ephemeris_file

    def _ensure_loaded(self) -> None:
        if self._ts is None:
            self._ts = load.timescale()
        if self._eph is None:
            self._eph = load(self._ephemeris_file)

    def phase(self, date: datetime) -> float:
        self._ensure_loaded()
        t = self._ts.from_datetime(ensure_utc(date))
        angle = almanac.moon_phase(self._eph, t)
        return (angle.degrees / 360.0) % 1.0
