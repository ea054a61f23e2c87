"""Errors raised while synchronizing with an SNTP server."""

from __future__ import annotations

from enum import Enum


class KissCode(Enum):
    """Reason given by a server in a Kiss-o'-Death reply (RFC 5905, section 7.4)."""

    UNKNOWN = "Unknown"
    ASSOCIATION_BELONGS_TO_ANYCAST_SERVER = "The association belongs to a anycast server"
    ASSOCIATION_BELONGS_TO_BROADCAST_SERVER = "The association belongs to a broadcast server"
    ASSOCIATION_BELONGS_TO_MANYCAST_SERVER = "The association belongs to a manycast server"
    SERVER_AUTHENTICATION_FAILED = "Server authentication failed"
    AUTOKEY_SEQUENCE_FAILED = "Autokey sequence failed"
    CRYPTOGRAPHIC_AUTHENTICATION_FAILED = (
        "Cryptographic authentication or identification failed"
    )
    ACCESS_DENIED = "Access denied by remote server"
    LOST_PEER = "Lost peer in symmetric mode"
    ASSOCIATION_NOT_YET_SYNCHRONIZED = (
        "The association has not yet synchronized for the first time"
    )
    NO_KEY_FOUND = "No key found.  Either the key was never installed or is not trusted"
    RATE_EXCEEDED = (
        "Rate exceeded.  The server has temporarily denied access because "
        "the client exceeded the rate threshold"
    )
    TINKERING_WITH_ASSOCIATION = "Somebody is tinkering with the association from a remote host"
    STEP_CHANGE = (
        " step change in system time has occurred, but the association "
        "has not yet resynchronized"
    )

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_reference_identifier(cls, reference_identifier) -> "KissCode":
        """Map a reference identifier to its kiss code.

        Accepts either the four-letter ASCII code itself or a reference
        identifier object whose ``kind`` is ASCII. Anything else, and any
        unrecognised code, gives ``KissCode.UNKNOWN``.
        """
        code = _ascii_code(reference_identifier)
        if code is None:
            return cls.UNKNOWN
        return _KISS_CODES.get(code, cls.UNKNOWN)


_KISS_CODES = {
    "ACST": KissCode.ASSOCIATION_BELONGS_TO_ANYCAST_SERVER,
    "AUTH": KissCode.SERVER_AUTHENTICATION_FAILED,
    "AUTO": KissCode.AUTOKEY_SEQUENCE_FAILED,
    "BCST": KissCode.ASSOCIATION_BELONGS_TO_BROADCAST_SERVER,
    "CRYP": KissCode.CRYPTOGRAPHIC_AUTHENTICATION_FAILED,
    "DENY": KissCode.ACCESS_DENIED,
    "DROP": KissCode.LOST_PEER,
    "RSTR": KissCode.ACCESS_DENIED,
    "INIT": KissCode.ASSOCIATION_NOT_YET_SYNCHRONIZED,
    "MCST": KissCode.ASSOCIATION_BELONGS_TO_MANYCAST_SERVER,
    "NKEY": KissCode.NO_KEY_FOUND,
    "RATE": KissCode.RATE_EXCEEDED,
    "RMOT": KissCode.TINKERING_WITH_ASSOCIATION,
    "STEP": KissCode.STEP_CHANGE,
}


def _ascii_code(reference_identifier) -> str | None:
    if isinstance(reference_identifier, str):
        return reference_identifier
    kind = getattr(reference_identifier, "kind", None)
    if getattr(kind, "name", None) != "ASCII":
        return None
    value = getattr(reference_identifier, "value", None)
    return value if isinstance(value, str) else None


class ProtocolErrorKind(Enum):
    """The ways a server reply can violate the protocol."""

    PACKET_IS_TOO_SHORT = "Server reply packet is too short"
    INVALID_PACKET_VERSION = "Server reply packet has unsupported version"
    INVALID_LEAP_INDICATOR = "Server reply packet contains invalid leap indicator"
    INVALID_MODE = "Server reply packet contains invalid mode"
    INVALID_ORIGINATE_TIMESTAMP = "Server reply contains invalid originate timestamp"
    INVALID_TRANSMIT_TIMESTAMP = "Server reply contains invalid transmit timestamp"
    INVALID_REFERENCE_IDENTIFIER = "Server reply contains invalid reference identifier"
    KISS_O_DEATH = "Kiss-o'-Death packet received"

    def __str__(self) -> str:
        return self.value


class SynchronizationError(Exception):
    """Raised when synchronization with a server fails."""

    def is_kiss_of_death(self) -> bool:
        """Tell whether the server sent a Kiss-o'-Death reply.

        Such a reply means the client should stop querying the server.
        """
        return isinstance(self, KissOfDeathError)


class ProtocolError(SynchronizationError):
    """The server reply broke the SNTP protocol."""

    def __init__(self, kind: ProtocolErrorKind) -> None:
        self.kind = kind
        super().__init__(f"Protocol error: {self.description}")

    @property
    def description(self) -> str:
        """The protocol problem, without the general prefix."""
        return self.kind.value


class KissOfDeathError(ProtocolError):
    """The server rejected the request with a Kiss-o'-Death reply."""

    def __init__(self, kiss_code: KissCode) -> None:
        self.kiss_code = kiss_code
        super().__init__(ProtocolErrorKind.KISS_O_DEATH)

    @property
    def description(self) -> str:
        return f"{self.kind.value}: {self.kiss_code}"


class SynchronizationIOError(SynchronizationError):
    """A socket error or timeout occurred during the query."""

    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(f"Input/output error: {error}")
        self.__cause__ = error


class ConversionError(OverflowError):
    """A timestamp or duration could not be converted without overflow."""

    def __init__(self, message: str = "Overflow during timestamp conversion") -> None:
        super().__init__(message)