# sntpsync

An RFC 5905 compliant Simple Network Time Protocol (SNTP) client library.
It sends one SNTPv4 request to a server and reports how far the local clock
is from the server's clock.

Features:

* a blocking client (`SntpClient`) and an asyncio client (`AsyncSntpClient`)
* results as plain Python values: `float` seconds, `datetime.timedelta` and
  timezone-aware `datetime.datetime`
* IPv4 and IPv6 support
* no dependencies outside the standard library

## Installation

```
pip install sntpsync
```

## Blocking usage

```python
from sntpsync.client import SntpClient

client = SntpClient()
result = client.synchronize("pool.ntp.org")

print("Clock offset:", result.clock_offset().as_secs_f64() * 1000, "ms")
print("Round trip delay:", result.round_trip_delay().as_secs_f64() * 1000, "ms")
print("Server UTC time:", result.datetime().to_datetime())
print("Unix timestamp:", result.datetime().unix_timestamp())
print("Reference identifier:", result.reference_identifier)
print("Stratum:", result.stratum)
print("Leap indicator:", result.leap_indicator)
```

The server address may be a host name or IP address with or without a port
(`"pool.ntp.org"`, `"127.0.0.1:123"`, `"[::1]:123"`), an `ipaddress`
object, or a `(host, port)` tuple. When no port is given, port 123 is used.
If the name resolves to several addresses only the first one is used.

## Asynchronous usage

```python
import asyncio
from sntpsync.client import AsyncSntpClient

async def current_time():
    client = AsyncSntpClient()
    result = await client.synchronize("pool.ntp.org")
    return result.datetime().to_datetime()

print(asyncio.run(current_time()))
```

## Configuration

```python
from sntpsync.client import Config, SntpClient

config = Config(bind_address=("::", 0), timeout=10.0)
client = SntpClient(config)
```

`Config` is immutable; both clients take it as their first argument.

* `bind_address` – local address of the UDP socket, `("0.0.0.0", 0)` by
  default. It may also be given as a string such as `"0.0.0.0:0"` or
  `"[::]:0"`. To reach IPv6 servers, bind to an IPv6 address such as
  `("::", 0)`.
* `timeout` – seconds to wait for the reply (a number or a
  `datetime.timedelta`), 3 by default. It must be positive.
* `connect_ip` – connect the socket to the server so that only its replies
  are accepted, `True` by default.

## Results

`synchronize` returns a `sntpsync.result.SynchronizationResult` with:

* `clock_offset()` – an `SntpDuration`; negative means the local clock is
  ahead of the server
* `round_trip_delay()` – an `SntpDuration`
* `datetime()` – an `SntpDateTime` for the corrected current time
* `reference_identifier`, `leap_indicator`, `stratum` – as sent by the server

`SntpDuration` offers `as_secs_f64()`, `signum()`, `abs_as_timedelta()` and
`to_timedelta()`. `SntpDateTime` offers `unix_timestamp()` (a `float`) and
`to_datetime()` (an aware UTC `datetime`).

The reference identifier prints as the server's ASCII code (for stratum 0
and 1), the IPv4 address of its source, or a hexadecimal hash for IPv6
secondary servers.

## Errors

Every failure of `synchronize` raises a subclass of
`sntpsync.errors.SynchronizationError`:

* `SynchronizationIOError` – socket errors, timeouts and the like; the
  underlying `OSError` is in its `error` attribute
* `ProtocolError` – the reply was malformed or did not match the request;
  its `kind` is a `ProtocolErrorKind`
* `KissOfDeathError` – a `ProtocolError` meaning the server refused the
  request; its `kiss_code` is a `KissCode`. Stop sending requests to that
  server.

```python
from sntpsync.client import SntpClient
from sntpsync.errors import SynchronizationError

try:
    SntpClient().synchronize("pool.ntp.org")
except SynchronizationError as err:
    if err.is_kiss_of_death():
        print("Server asked us to go away:", err)
```

Conversions of durations and dates that cannot be represented (overflow,
NaN, or a time before the Unix epoch for `unix_timestamp()`) raise
`sntpsync.errors.ConversionError`, a subclass of `OverflowError`.

## Lower-level pieces

`sntpsync.packet` holds the wire format (`Packet`, `SntpTimestamp`,
`LeapIndicator`, `Mode`, `ReferenceIdentifier`) and `sntpsync.exchange`
holds `Request` and `Reply`, which validate a reply and compute offset and
delay from its timestamps. They can be used to test or process packets
without a network.

## System clock assumptions

`SynchronizationResult` stores only the offset to the system clock; the date
and time are computed from the current system time when asked for. If the
system clock is changed in between, the result will be wrong.

## Command line

```
sntpsync pool.ntp.org
```

prints the clock offset, round trip delay, local time, server Unix timestamp,
reference identifier and stratum. The server defaults to `pool.ntp.org`.
Options:

* `--timeout SECONDS` – how long to wait for a reply (3 by default)
* `--bind ADDRESS` – local address to bind to (`0.0.0.0:0` by default)

On failure the error is printed to standard error and the exit status is 1.

## What it does not do

This package is a client only. It does not set or adjust the system clock,
does not run an NTP server, and does not poll servers repeatedly or combine
answers from several servers.