"""Blocking and asyncio SNTP clients, plus a small command that prints the result."""

from __future__ import annotations

import argparse
import asyncio
import ipaddress
import socket
import sys
from dataclasses import dataclass, field
from datetime import timedelta

from .addresses import to_server_address
from .errors import SynchronizationError, SynchronizationIOError
from .exchange import Reply, Request
from .packet import Packet
from .result import SynchronizationResult

SNTP_PORT = 123


@dataclass(frozen=True)
class Config:
    """Client settings.

    ``bind_address`` is the local address used for the UDP socket; the
    default lets the system choose an IPv4 address and port, so an IPv6
    bind address is needed to reach IPv6 servers. ``timeout`` is how long
    to wait for a reply, in seconds. With ``connect_ip`` the socket is
    connected to the server and only accepts replies from it.
    """

    bind_address: tuple = ("0.0.0.0", 0)
    timeout: float = 3.0
    connect_ip: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "bind_address", to_server_address(self.bind_address, 0))
        timeout = self.timeout
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        timeout = float(timeout)
        if not timeout > 0:
            raise ValueError("timeout must be positive")
        object.__setattr__(self, "timeout", timeout)


def _family_of(host) -> int:
    try:
        version = ipaddress.ip_address(str(host).split("%", 1)[0]).version
    except ValueError:
        return socket.AF_INET
    return socket.AF_INET6 if version == 6 else socket.AF_INET


def _first_address(infos, host) -> tuple:
    if not infos:
        raise OSError(f"could not resolve {host!r}")
    return infos[0][4]


def _resolve(target: tuple, family: int) -> tuple:
    if len(target) == 4:
        return target
    host, port = target
    infos = socket.getaddrinfo(host, port, family, socket.SOCK_DGRAM)
    return _first_address(infos, host)


async def _resolve_async(loop, target: tuple, family: int) -> tuple:
    if len(target) == 4:
        return target
    host, port = target
    infos = await loop.getaddrinfo(host, port, family=family, type=socket.SOCK_DGRAM)
    return _first_address(infos, host)


@dataclass
class SntpClient:
    """Blocking client."""

    config: Config = field(default_factory=Config)

    def synchronize(self, server_address) -> SynchronizationResult:
        """Query the server and return the synchronization result.

        The port defaults to 123. If the address resolves to several
        addresses only the first is used. Raises SynchronizationIOError on
        socket errors and timeouts, ProtocolError on bad replies.
        """
        config = self.config
        target_spec = to_server_address(server_address, SNTP_PORT)
        family = _family_of(config.bind_address[0])
        try:
            with socket.socket(family, socket.SOCK_DGRAM) as sock:
                sock.bind(config.bind_address)
                sock.settimeout(config.timeout)
                target = _resolve(target_spec, family)
                if config.connect_ip:
                    sock.connect(target)
                request = Request()
                if config.connect_ip:
                    sock.send(request.to_bytes())
                else:
                    sock.sendto(request.to_bytes(), target)
                data, sender = sock.recvfrom(Packet.ENCODED_LEN)
        except OSError as error:
            raise SynchronizationIOError(error) from error
        return Reply(request, Packet.from_bytes(data, sender)).process()


class _ReplyProtocol(asyncio.DatagramProtocol):
    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.reply = loop.create_future()

    def datagram_received(self, data: bytes, addr) -> None:
        if not self.reply.done():
            self.reply.set_result((data[: Packet.ENCODED_LEN], addr))

    def error_received(self, exc: Exception) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc)

    def connection_lost(self, exc) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc or ConnectionError("socket closed"))


@dataclass
class AsyncSntpClient:
    """Asynchronous client for asyncio."""

    config: Config = field(default_factory=Config)

    async def synchronize(self, server_address) -> SynchronizationResult:
        """Query the server and return the synchronization result.

        Behaves like the blocking client; waiting for the reply does not
        block the event loop.
        """
        config = self.config
        target_spec = to_server_address(server_address, SNTP_PORT)
        family = _family_of(config.bind_address[0])
        loop = asyncio.get_running_loop()
        try:
            target = await _resolve_async(loop, target_spec, family)
            options = {"local_addr": config.bind_address, "family": family}
            if config.connect_ip:
                options["remote_addr"] = target
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: _ReplyProtocol(loop), **options
            )
            try:
                request = Request()
                if config.connect_ip:
                    transport.sendto(request.to_bytes())
                else:
                    transport.sendto(request.to_bytes(), target)
                try:
                    data, sender = await asyncio.wait_for(protocol.reply, config.timeout)
                except asyncio.TimeoutError:
                    raise TimeoutError("Timeout while waiting for server reply") from None
            finally:
                transport.close()
        except OSError as error:
            raise SynchronizationIOError(error) from error
        return Reply(request, Packet.from_bytes(data, sender)).process()


def _report(result: SynchronizationResult) -> str:
    local_time = result.datetime().to_datetime().astimezone()
    lines = [
        f"Clock offset: {result.clock_offset().as_secs_f64() * 1000.0} ms",
        f"Round trip delay: {result.round_trip_delay().as_secs_f64() * 1000.0} ms",
        f"Local time: {local_time}",
        f"Server UTC UNIX timestamp: {int(result.datetime().unix_timestamp())}",
        f"Reference identifier: {result.reference_identifier}",
        f"Stratum: {result.stratum}",
    ]
    return "\n".join(lines)


def main(argv=None) -> int:
    """Synchronize with a server and print what was found out."""
    parser = argparse.ArgumentParser(description="Query an SNTP server.")
    parser.add_argument("server", nargs="?", default="pool.ntp.org", help="host or host:port")
    parser.add_argument("--timeout", type=float, default=3.0, help="seconds to wait for a reply")
    parser.add_argument("--bind", default="0.0.0.0:0", help="local address to bind to")
    args = parser.parse_args(argv)

    try:
        config = Config(bind_address=args.bind, timeout=args.timeout)
    except ValueError as error:
        parser.error(str(error))
    try:
        result = SntpClient(config).synchronize(args.server)
    except SynchronizationError as error:
        print(error, file=sys.stderr)
        return 1
    print(_report(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())