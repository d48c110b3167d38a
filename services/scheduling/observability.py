"""
NIGHTPLAN Observability Oracle Boundary

The scheduler never computes celestial mechanics itself. It asks an
ObservabilityOracle for the altitude and airmass of a target at a given
place and instant. Every component goes through ``observe`` so that oracle
failures are reported the same way everywhere.

HourAngleObservability is a small reference oracle for offline planning and
tests. It is not a precision ephemeris: no refraction, precession or proper
motion.
"""

import math
from datetime import datetime, timezone
from typing import Protocol

from nightplan.exceptions import NightplanError, ObservabilityError
from nightplan.logging_config import get_logger
from nightplan.types import Degrees, Hours, ensure_utc

from .models import Location, ObservabilityData, Target

logger = get_logger(__name__)

J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class ObservabilityOracle(Protocol):
    """Provides altitude/airmass for a target at a place and instant.

    Must be callable repeatedly with different dates for the same target
    without side effects. Fields it cannot determine are left as None.
    """

    def compute_observability(
        self,
        target: Target,
        latitude: Degrees,
        longitude: Degrees,
        date: datetime,
    ) -> ObservabilityData:
        ...


def observe(
    oracle: ObservabilityOracle,
    target: Target,
    location: Location,
    when: datetime,
) -> ObservabilityData:
    """Query the oracle, converting hard failures into ObservabilityError.

    Raises:
        ObservabilityError: The oracle raised; the run cannot continue
    """
    try:
        return oracle.compute_observability(
            target,
            location.latitude,
            location.longitude,
            when,
        )
    except NightplanError:
        raise
    except Exception as e:
        logger.error(f"Observability oracle failed for {target.id} at {when.isoformat()}: {e}")
        raise ObservabilityError(
            f"Observability oracle failed: {e}",
            target_id=target.id,
            when=when.isoformat(),
        ) from e


class HourAngleObservability:
    """Reference oracle using a simplified hour-angle model."""

    def compute_observability(
        self,
        target: Target,
        latitude: Degrees,
        longitude: Degrees,
        date: datetime,
    ) -> ObservabilityData:
        lst = self.local_sidereal_time(ensure_utc(date), longitude)
        ha = lst - target.ra_hours
        if ha < -12:
            ha += 24
        elif ha > 12:
            ha -= 24

        ha_rad = math.radians(ha * 15)
        dec_rad = math.radians(target.dec_degrees)
        lat_rad = math.radians(latitude)

        sin_alt = (
            math.sin(lat_rad) * math.sin(dec_rad) +
            math.cos(lat_rad) * math.cos(dec_rad) * math.cos(ha_rad)
        )
        alt_rad = math.asin(max(-1.0, min(1.0, sin_alt)))
        altitude = math.degrees(alt_rad)

        # Azimuth is undefined at the zenith and at the poles
        denominator = math.cos(lat_rad) * math.cos(alt_rad)
        if abs(denominator) > 1e-9:
            cos_az = (math.sin(dec_rad) - math.sin(lat_rad) * sin_alt) / denominator
            azimuth = math.degrees(math.acos(max(-1.0, min(1.0, cos_az))))
            if math.sin(ha_rad) > 0:
                azimuth = 360.0 - azimuth
        else:
            azimuth = 0.0

        airmass = 1.0 / math.sin(alt_rad) if altitude > 0 else math.inf

        return ObservabilityData(
            altitude=altitude,
            azimuth=azimuth,
            airmass=airmass,
        )

    @staticmethod
    def local_sidereal_time(when: datetime, longitude: Degrees) -> Hours:
        """Local sidereal time in hours."""
        days = (when - J2000).total_seconds() / 86400

        # Greenwich sidereal time
        gst = (18.697374558 + 24.06570982441908 * days) % 24

        return (gst + longitude / 15) % 24
