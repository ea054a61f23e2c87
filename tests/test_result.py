import math
import time
from datetime import datetime, timedelta, timezone

import pytest

from sntpsync.errors import ConversionError
from sntpsync.packet import LeapIndicator, ReferenceIdentifier
from sntpsync.result import SntpDateTime, SntpDuration, SynchronizationResult


def test_duration_as_secs_f64():
    assert SntpDuration(3600.0).as_secs_f64() == 3600.0
    assert SntpDuration(-3600.0).as_secs_f64() == -3600.0


def test_duration_abs_and_signum():
    positive = SntpDuration(3600.0)
    negative = SntpDuration(-3600.0)

    assert positive.abs_as_timedelta() == timedelta(seconds=3600)
    assert negative.abs_as_timedelta() == timedelta(seconds=3600)
    assert positive.signum() == 1
    assert negative.signum() == -1


def test_duration_signum_of_zero_and_nan():
    assert SntpDuration(0.0).signum() == 1
    assert SntpDuration(-0.0).signum() == -1
    assert SntpDuration(math.nan).signum() == 0


def test_duration_abs_fails_on_overflow():
    with pytest.raises(ConversionError):
        SntpDuration(2e19).abs_as_timedelta()


def test_duration_abs_fails_on_infinity():
    with pytest.raises(ConversionError):
        SntpDuration(-math.inf).abs_as_timedelta()


def test_duration_to_timedelta():
    assert SntpDuration(3600.0).to_timedelta() == timedelta(hours=1)
    assert SntpDuration(-3600.0).to_timedelta() == timedelta(hours=-1)


def test_duration_to_timedelta_fails_for_nan():
    with pytest.raises(ConversionError):
        SntpDuration(math.nan).to_timedelta()


def test_duration_ordering():
    assert SntpDuration(-1.0) < SntpDuration(0.5)


def test_datetime_to_datetime_is_offset_from_now():
    converted = SntpDateTime(SntpDuration(0.1)).to_datetime()
    diff = converted - datetime.now(timezone.utc)

    assert converted.tzinfo is timezone.utc
    assert timedelta(milliseconds=90) < diff < timedelta(milliseconds=110)


def test_datetime_to_datetime_fails_for_nan():
    with pytest.raises(ConversionError):
        SntpDateTime(SntpDuration(math.nan)).to_datetime()


def test_datetime_to_datetime_fails_on_overflow():
    with pytest.raises(ConversionError):
        SntpDateTime(SntpDuration(8e13)).to_datetime()


def test_unix_timestamp_adds_offset():
    expected = time.time() + 3600.0
    stamp = SntpDateTime(SntpDuration(3600.0)).unix_timestamp()

    assert abs(stamp - expected) < 0.1


def test_unix_timestamp_subtracts_negative_offset():
    expected = time.time() - 60.0
    stamp = SntpDateTime(SntpDuration(-60.0)).unix_timestamp()

    assert abs(stamp - expected) < 0.1


def test_unix_timestamp_before_epoch_fails():
    with pytest.raises(ConversionError):
        SntpDateTime(SntpDuration(-1e10)).unix_timestamp()


def test_unix_timestamp_fails_for_nan():
    with pytest.raises(ConversionError):
        SntpDateTime(SntpDuration(math.nan)).unix_timestamp()


def test_synchronization_result_accessors():
    identifier = ReferenceIdentifier.ascii(b"LOCL")
    result = SynchronizationResult(
        clock_offset_s=-0.5,
        round_trip_delay_s=0.2,
        reference_identifier=identifier,
        leap_indicator=LeapIndicator.NO_WARNING,
        stratum=1,
    )

    assert result.clock_offset() == SntpDuration(-0.5)
    assert result.round_trip_delay().as_secs_f64() == 0.2
    assert result.datetime() == SntpDateTime(SntpDuration(-0.5))
    assert str(result.reference_identifier) == "LOCL"
    assert result.leap_indicator is LeapIndicator.NO_WARNING
    assert result.stratum == 1


def test_synchronization_result_datetime_uses_clock_offset():
    result = SynchronizationResult(
        clock_offset_s=7200.0,
        round_trip_delay_s=0.01,
        reference_identifier=ReferenceIdentifier.ipv6_hash(b"\x01\x02\x03\x04"),
        leap_indicator=LeapIndicator.ALARM_CONDITION,
        stratum=3,
    )

    diff = result.datetime().to_datetime() - datetime.now(timezone.utc)
    assert timedelta(hours=2) - timedelta(seconds=1) < diff <= timedelta(hours=2)