"""Normalisation of server addresses given with or without a port."""

from __future__ import annotations

import ipaddress

_MAX_PORT = 0xFFFF


def _check_port(port) -> int:
    if isinstance(port, bool) or not isinstance(port, int):
        raise TypeError(f"port must be an integer, not {type(port).__name__}")
    if not 0 <= port <= _MAX_PORT:
        raise ValueError(f"port out of range: {port}")
    return port


def _parse_port(text: str, address: str) -> int:
    if not text.isdigit():
        raise ValueError(f"invalid socket address: {address!r}")
    return _check_port(int(text))


def _from_string(address: str, default_port: int) -> tuple[str, int]:
    if ":" not in address:
        return address, default_port
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not rest.startswith(":"):
            raise ValueError(f"invalid socket address: {address!r}")
        ipaddress.IPv6Address(host)
        return host, _parse_port(rest[1:], address)
    host, _, port = address.rpartition(":")
    if not host or ":" in host:
        raise ValueError(f"invalid socket address: {address!r}")
    return host, _parse_port(port, address)


def to_server_address(address, default_port: int) -> tuple:
    """Turn a server address into a socket address tuple.

    Strings may be ``host`` or ``host:port`` (``[v6]:port`` for IPv6);
    IP address objects take ``default_port``. Tuples carrying a port are
    kept as they are, with the host turned into a string.
    """
    default_port = _check_port(default_port)
    if isinstance(address, str):
        return _from_string(address, default_port)
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(address), default_port
    if isinstance(address, tuple):
        if len(address) == 2:
            host, port = address
            return str(host), _check_port(port)
        if len(address) == 4:
            host, port, flowinfo, scope_id = address
            ipaddress.IPv6Address(str(host))
            return str(host), _check_port(port), flowinfo, scope_id
        raise ValueError(f"invalid socket address: {address!r}")
    raise TypeError(f"unsupported server address type: {type(address).__name__}")