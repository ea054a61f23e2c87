import time

import pytest

from sntpsync.errors import KissCode, KissOfDeathError, ProtocolError, ProtocolErrorKind
from sntpsync.exchange import Reply, Request
from sntpsync.packet import LeapIndicator, Mode, Packet, ReferenceIdentifier, SntpTimestamp

MS = 1_000_000
DAY_NS = 86_400 * 1_000_000_000


def _ts(unix_ns):
    return SntpTimestamp.from_unix_ns(unix_ns)


def _reply_packet(now, originate, *, mode=Mode.SERVER, stratum=1, ident=b"LOCL",
                  transmit=None, receive_offset_ms=-500):
    return Packet(
        li=LeapIndicator.NO_WARNING,
        mode=mode,
        stratum=stratum,
        reference_identifier=ReferenceIdentifier.ascii(ident),
        reference_timestamp=_ts(now - DAY_NS),
        originate_timestamp=originate,
        receive_timestamp=_ts(now + receive_offset_ms * MS),
        transmit_timestamp=transmit if transmit is not None else _ts(now + receive_offset_ms * MS),
    )


def test_basic_synchronization_works():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, request.packet.transmit_timestamp, receive_offset_ms=-400)
    reply = Reply(request, packet, _ts(now + 200 * MS))

    result = reply.process()

    assert -0.51 <= result.clock_offset().as_secs_f64() <= -0.49
    assert 0.19 <= result.round_trip_delay().as_secs_f64() <= 0.21
    assert str(result.reference_identifier) == "LOCL"
    assert result.leap_indicator is LeapIndicator.NO_WARNING
    assert result.stratum == 1


def test_broadcast_mode_is_accepted():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, request.packet.transmit_timestamp, mode=Mode.BROADCAST)
    result = Reply(request, packet, _ts(now)).process()
    assert result.stratum == 1


def test_sync_fails_if_reply_originate_ts_does_not_match_request_transmit_ts():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, _ts(now + 10 * MS))
    with pytest.raises(ProtocolError) as info:
        Reply(request, packet).process()
    assert info.value.kind is ProtocolErrorKind.INVALID_ORIGINATE_TIMESTAMP
    assert not info.value.is_kiss_of_death()


def test_sync_fails_if_reply_contains_zero_transmit_timestamp():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, request.packet.transmit_timestamp, transmit=SntpTimestamp.zero())
    with pytest.raises(ProtocolError) as info:
        Reply(request, packet).process()
    assert info.value.kind is ProtocolErrorKind.INVALID_TRANSMIT_TIMESTAMP


def test_sync_fails_if_reply_contains_wrong_mode():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, request.packet.transmit_timestamp, mode=Mode.CLIENT)
    with pytest.raises(ProtocolError) as info:
        Reply(request, packet).process()
    assert info.value.kind is ProtocolErrorKind.INVALID_MODE


def test_sync_fails_if_kiss_o_death_received():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, request.packet.transmit_timestamp, stratum=0, ident=b"RATE")
    with pytest.raises(KissOfDeathError) as info:
        Reply(request, packet).process()
    assert info.value.kiss_code is KissCode.RATE_EXCEEDED
    assert info.value.is_kiss_of_death()


def test_kiss_o_death_is_checked_before_originate_timestamp():
    now = time.time_ns()
    request = Request(_ts(now))
    packet = _reply_packet(now, _ts(now + MS), stratum=0, ident=b"DENY")
    with pytest.raises(KissOfDeathError) as info:
        Reply(request, packet).process()
    assert info.value.kiss_code is KissCode.ACCESS_DENIED


def test_request_encodes_client_packet_with_transmit_time():
    stamp = _ts(1096254668 * 1_000_000_000 + 213_800_999)
    data = Request(stamp).to_bytes()
    assert len(data) == 48
    assert data[0] == 0x23
    assert data[1:40] == bytes(39)
    assert data[40:48] == bytes([0xC5, 0x02, 0x03, 0x4C, 0x36, 0xBB, 0xA9, 0x8A])


def test_default_request_is_stamped_with_current_time():
    before = SntpTimestamp.now()
    request = Request()
    after = SntpTimestamp.now()
    assert before <= request.transmit_timestamp <= after
    assert request.packet.mode is Mode.CLIENT