"""Outcome of a synchronization: signed durations, corrected time and server details."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .errors import ConversionError
from .packet import LeapIndicator, ReferenceIdentifier


@dataclass(frozen=True, order=True)
class SntpDuration:
    """A signed duration in seconds, such as a clock offset."""

    seconds: float

    def abs_as_timedelta(self) -> timedelta:
        """The absolute value as a timedelta.

        Raises ConversionError if the value is not finite or does not fit.
        """
        magnitude = abs(self.seconds)
        if not math.isfinite(magnitude):
            raise ConversionError()
        try:
            return timedelta(seconds=magnitude)
        except (OverflowError, ValueError):
            raise ConversionError() from None

    def signum(self) -> int:
        """1 for positive values (and +0.0), -1 for negative ones (and -0.0), 0 for NaN."""
        if math.isnan(self.seconds):
            return 0
        return int(math.copysign(1.0, self.seconds))

    def as_secs_f64(self) -> float:
        """The number of seconds, with its sign."""
        return self.seconds

    def to_timedelta(self) -> timedelta:
        """The signed value as a timedelta; raises ConversionError if it cannot be represented."""
        magnitude = self.abs_as_timedelta()
        return -magnitude if self.signum() < 0 else magnitude


@dataclass(frozen=True)
class SntpDateTime:
    """The synchronized time, kept as an offset from the system clock.

    The current time is computed when asked for, so the system clock is
    assumed not to have been changed since synchronization.
    """

    offset: SntpDuration

    def unix_timestamp(self) -> float:
        """Seconds since the Unix epoch of the corrected current time.

        Raises ConversionError on overflow or when the result lies before
        the epoch.
        """
        magnitude = self.offset.abs_as_timedelta().total_seconds()
        now = time.time()
        corrected = now + magnitude if self.offset.signum() >= 0 else now - magnitude
        if not math.isfinite(corrected) or corrected < 0:
            raise ConversionError()
        return corrected

    def to_datetime(self) -> datetime:
        """The corrected current time as an aware UTC datetime."""
        offset = self.offset.to_timedelta()
        try:
            return datetime.now(timezone.utc) + offset
        except OverflowError:
            raise ConversionError() from None


@dataclass(frozen=True)
class SynchronizationResult:
    """What a successful synchronization found out about the server and the local clock."""

    clock_offset_s: float
    round_trip_delay_s: float
    reference_identifier: ReferenceIdentifier
    leap_indicator: LeapIndicator
    stratum: int

    def clock_offset(self) -> SntpDuration:
        """Offset of the server clock from the local one; negative means the local clock is ahead."""
        return SntpDuration(self.clock_offset_s)

    def round_trip_delay(self) -> SntpDuration:
        """Time taken by the request and reply to travel to the server and back."""
        return SntpDuration(self.round_trip_delay_s)

    def datetime(self) -> SntpDateTime:
        """The current time according to the server."""
        return SntpDateTime(self.clock_offset())