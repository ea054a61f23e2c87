"""One request/reply exchange with a server and the arithmetic on its timestamps."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import KissCode, KissOfDeathError, ProtocolError, ProtocolErrorKind
from .packet import LeapIndicator, Mode, Packet, ReferenceIdentifier, SntpTimestamp
from .result import SynchronizationResult


@dataclass(frozen=True)
class Request:
    """A client request, stamped with the time it is sent."""

    transmit_timestamp: SntpTimestamp = field(default_factory=SntpTimestamp.now)
    packet: Packet = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        packet = Packet(
            li=LeapIndicator.NO_WARNING,
            mode=Mode.CLIENT,
            stratum=0,
            reference_identifier=ReferenceIdentifier.empty(),
            reference_timestamp=SntpTimestamp.zero(),
            originate_timestamp=SntpTimestamp.zero(),
            receive_timestamp=SntpTimestamp.zero(),
            transmit_timestamp=self.transmit_timestamp,
        )
        object.__setattr__(self, "packet", packet)

    def to_bytes(self) -> bytes:
        """The request as it goes on the wire."""
        return self.packet.to_bytes()


@dataclass(frozen=True)
class Reply:
    """A server reply to a request, stamped with the time it arrived."""

    request: Request
    reply: Packet
    reply_timestamp: SntpTimestamp = field(default_factory=SntpTimestamp.now)

    def _check(self) -> None:
        reply = self.reply
        if reply.stratum == 0:
            raise KissOfDeathError(
                KissCode.from_reference_identifier(reply.reference_identifier)
            )
        if reply.originate_timestamp != self.request.packet.transmit_timestamp:
            raise ProtocolError(ProtocolErrorKind.INVALID_ORIGINATE_TIMESTAMP)
        if reply.transmit_timestamp.is_zero():
            raise ProtocolError(ProtocolErrorKind.INVALID_TRANSMIT_TIMESTAMP)
        if reply.mode not in (Mode.SERVER, Mode.BROADCAST):
            raise ProtocolError(ProtocolErrorKind.INVALID_MODE)

    def process(self) -> SynchronizationResult:
        """Validate the reply and compute clock offset and round trip delay.

        Raises ProtocolError (or KissOfDeathError) if the reply is unusable.
        """
        self._check()
        reply = self.reply
        originate = reply.originate_timestamp
        receive = reply.receive_timestamp
        transmit = reply.transmit_timestamp
        arrived = self.reply_timestamp

        round_trip_delay = (arrived - originate) - (transmit - receive)
        clock_offset = ((receive - originate) + (transmit - arrived)) / 2.0

        return SynchronizationResult(
            clock_offset_s=clock_offset,
            round_trip_delay_s=round_trip_delay,
            reference_identifier=reply.reference_identifier,
            leap_indicator=reply.li,
            stratum=reply.stratum,
        )