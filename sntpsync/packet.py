"""SNTP packet layout: timestamps, header fields and the 48-byte wire format."""

from __future__ import annotations

import ipaddress
import time
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .errors import ProtocolError, ProtocolErrorKind

_NTP_TO_UNIX_SECONDS = 2_208_988_800
_NANOS_PER_SECOND = 1_000_000_000
_FRACTION_SCALE = 1 << 32
_ERA_ONE = 1 << 64
_TIMESTAMP_LIMIT = 1 << 65
_LOW_63_BITS = 0x7FFF_FFFF_FFFF_FFFF
_HIGH_BIT = 0x8000_0000_0000_0000


@dataclass(frozen=True, order=True)
class SntpTimestamp:
    """An NTP timestamp in 32.32 fixed point, extended past the 2036 era rollover."""

    value: int

    @classmethod
    def zero(cls) -> "SntpTimestamp":
        """The all-zero timestamp, meaning "not set"."""
        return cls(0)

    @classmethod
    def from_unix_ns(cls, unix_ns: int) -> "SntpTimestamp":
        """Build a timestamp from nanoseconds since the Unix epoch."""
        if unix_ns < 0:
            raise ValueError("time is before the Unix epoch")
        seconds, nanos = divmod(unix_ns, _NANOS_PER_SECOND)
        fraction = (nanos << 32) // _NANOS_PER_SECOND
        return cls(((seconds + _NTP_TO_UNIX_SECONDS) << 32) + fraction)

    @classmethod
    def now(cls) -> "SntpTimestamp":
        """The current system time as a timestamp."""
        return cls.from_unix_ns(time.time_ns())

    def is_zero(self) -> bool:
        """Tell whether this is the unset timestamp."""
        return self.value == 0

    @classmethod
    def from_bytes(cls, data) -> "SntpTimestamp":
        """Decode 8 big-endian bytes; values with the top bit clear fall in era 1."""
        raw = bytes(data)
        if len(raw) != 8:
            raise ValueError(f"timestamp needs 8 bytes, got {len(raw)}")
        value = int.from_bytes(raw, "big")
        if not value & _HIGH_BIT:
            value += _ERA_ONE
        return cls(value)

    def to_bytes(self) -> bytes:
        """Encode as 8 big-endian bytes."""
        if not 0 <= self.value < _TIMESTAMP_LIMIT:
            raise ValueError("timestamp out of encodable range")
        wire = self.value if self.value < _ERA_ONE else self.value & _LOW_63_BITS
        return wire.to_bytes(8, "big")

    def __sub__(self, other: "SntpTimestamp") -> float:
        """Difference in seconds, as a float."""
        if not isinstance(other, SntpTimestamp):
            return NotImplemented
        return (self.value - other.value) / _FRACTION_SCALE


class LeapIndicator(Enum):
    """Warning of a leap second to be inserted or deleted at the end of the day."""

    NO_WARNING = 0
    LAST_MINUTE_HAS_61_SECONDS = 1
    LAST_MINUTE_HAS_59_SECONDS = 2
    ALARM_CONDITION = 3

    @classmethod
    def from_wire(cls, raw: int) -> "LeapIndicator":
        """Decode the two-bit field, raising ProtocolError if it is invalid."""
        try:
            return _LEAP_FROM_WIRE[raw]
        except KeyError:
            raise ProtocolError(ProtocolErrorKind.INVALID_LEAP_INDICATOR) from None

    @property
    def wire(self) -> int:
        """The value carried in the packet header."""
        return _LEAP_TO_WIRE[self]


_LEAP_FROM_WIRE = {
    0: LeapIndicator.NO_WARNING,
    1: LeapIndicator.LAST_MINUTE_HAS_59_SECONDS,
    2: LeapIndicator.LAST_MINUTE_HAS_61_SECONDS,
    3: LeapIndicator.ALARM_CONDITION,
}
_LEAP_TO_WIRE = {leap: raw for raw, leap in _LEAP_FROM_WIRE.items()}


class Mode(Enum):
    """Association mode of a packet."""

    CLIENT = 3
    SERVER = 4
    BROADCAST = 5

    @classmethod
    def from_wire(cls, raw: int) -> "Mode":
        """Decode the three-bit field, raising ProtocolError if unsupported."""
        try:
            return cls(raw)
        except ValueError:
            raise ProtocolError(ProtocolErrorKind.INVALID_MODE) from None


class ReferenceIdentifierKind(Enum):
    """What a reference identifier holds."""

    EMPTY = "empty"
    ASCII = "ascii"
    IP_ADDRESS = "ip_address"
    MD5_HASH = "md5_hash"


def _four_bytes(raw) -> bytes:
    data = bytes(raw)
    if len(data) != 4:
        raise ValueError(f"reference identifier needs 4 bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class ReferenceIdentifier:
    """Identifies the server's reference source.

    An ASCII code for primary servers, the source's IPv4 address for IPv4
    secondary servers, or the first 32 bits of an MD5 hash of the source's
    IPv6 address for IPv6 secondary servers.
    """

    kind: ReferenceIdentifierKind
    value: object = None

    @classmethod
    def empty(cls) -> "ReferenceIdentifier":
        """No reference identifier, as sent in client requests."""
        return cls(ReferenceIdentifierKind.EMPTY)

    @classmethod
    def ascii(cls, raw) -> "ReferenceIdentifier":
        """An ASCII code, with trailing NUL bytes removed."""
        data = _four_bytes(raw)
        if not data.isascii():
            raise ProtocolError(ProtocolErrorKind.INVALID_REFERENCE_IDENTIFIER)
        return cls(ReferenceIdentifierKind.ASCII, data.decode("ascii").rstrip("\x00"))

    @classmethod
    def ipv4_address(cls, raw) -> "ReferenceIdentifier":
        """The IPv4 address of the synchronization source."""
        return cls(ReferenceIdentifierKind.IP_ADDRESS, ipaddress.IPv4Address(_four_bytes(raw)))

    @classmethod
    def ipv6_hash(cls, raw) -> "ReferenceIdentifier":
        """A 32-bit hash of the source's IPv6 address."""
        return cls(ReferenceIdentifierKind.MD5_HASH, int.from_bytes(_four_bytes(raw), "big"))

    def is_empty(self) -> bool:
        """Tell whether no identifier is present."""
        return self.kind is ReferenceIdentifierKind.EMPTY

    def __str__(self) -> str:
        if self.kind is ReferenceIdentifierKind.EMPTY:
            return ""
        if self.kind is ReferenceIdentifierKind.MD5_HASH:
            return f"0x{self.value:X}"
        return str(self.value)


def _is_ipv4(server_address) -> bool:
    host = server_address[0] if isinstance(server_address, tuple) else server_address
    if isinstance(host, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return host.version == 4
    host = str(host)
    try:
        return ipaddress.ip_address(host.split("%", 1)[0]).version == 4
    except ValueError:
        return ":" not in host


@dataclass
class Packet:
    """An SNTP packet header."""

    ENCODED_LEN: ClassVar[int] = 48
    _VERSION_BITS: ClassVar[int] = 0x20

    li: LeapIndicator
    mode: Mode
    stratum: int
    reference_identifier: ReferenceIdentifier
    reference_timestamp: SntpTimestamp
    originate_timestamp: SntpTimestamp
    receive_timestamp: SntpTimestamp
    transmit_timestamp: SntpTimestamp

    @classmethod
    def from_bytes(cls, data, server_address) -> "Packet":
        """Decode a server reply received from ``server_address``."""
        raw = bytes(data)
        if len(raw) < cls.ENCODED_LEN:
            raise ProtocolError(ProtocolErrorKind.PACKET_IS_TOO_SHORT)
        if (raw[0] >> 3) & 0x07 != 4:
            raise ProtocolError(ProtocolErrorKind.INVALID_PACKET_VERSION)

        li = LeapIndicator.from_wire(raw[0] >> 6)
        mode = Mode.from_wire(raw[0] & 0x07)
        stratum = raw[1]

        raw_identifier = raw[12:16]
        if stratum in (0, 1):
            reference_identifier = ReferenceIdentifier.ascii(raw_identifier)
        elif _is_ipv4(server_address):
            reference_identifier = ReferenceIdentifier.ipv4_address(raw_identifier)
        else:
            reference_identifier = ReferenceIdentifier.ipv6_hash(raw_identifier)

        return cls(
            li=li,
            mode=mode,
            stratum=stratum,
            reference_identifier=reference_identifier,
            reference_timestamp=SntpTimestamp.from_bytes(raw[16:24]),
            originate_timestamp=SntpTimestamp.from_bytes(raw[24:32]),
            receive_timestamp=SntpTimestamp.from_bytes(raw[32:40]),
            transmit_timestamp=SntpTimestamp.from_bytes(raw[40:48]),
        )

    def to_bytes(self) -> bytes:
        """Encode a client packet; its reference identifier must be empty."""
        if not self.reference_identifier.is_empty():
            raise ValueError("Reference identifier should be empty for client packets")
        header = bytes(
            [
                (self.li.wire << 6) | self._VERSION_BITS | self.mode.value,
                self.stratum,
            ]
        )
        return b"".join(
            (
                header,
                bytes(14),
                self.reference_timestamp.to_bytes(),
                self.originate_timestamp.to_bytes(),
                self.receive_timestamp.to_bytes(),
                self.transmit_timestamp.to_bytes(),
            )
        )