from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Protocol

from .errors import LocalIOError, RemoteIOError
from .options import Direction


class Stream(Protocol):
    def send(self, data: memoryview) -> int: ...

    def recv_into(self, buffer: bytearray) -> int: ...


@dataclass(slots=True)
class Metrics:
    bytes_transferred: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: Optional[float] = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def throughput_mibps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return self.bytes_transferred / self.duration_s / (1024 * 1024)


def send_stream(conn: Stream, source: BinaryIO, buffer: bytearray) -> int:
    """Copy source into the connection until source runs dry.

    A read that does not fill the buffer is taken as end of input; its bytes
    are still sent. Each chunk goes out in a single send, and a send that
    moves fewer bytes than asked is an error.
    """
    view = memoryview(buffer)
    total = 0

    while True:
        try:
            n = source.readinto(buffer) or 0
        except OSError as exc:
            raise LocalIOError(f"error reading from stdin: {exc}") from exc
        if n == 0:
            break

        try:
            sent = conn.send(view[:n])
        except OSError as exc:
            raise RemoteIOError(f"error sending data: {exc}") from exc
        if sent != n:
            raise RemoteIOError(f"error sending data: short send ({sent} of {n} bytes)")
        total += n

        if n < len(buffer):
            break

    return total


def receive_stream(conn: Stream, sink: BinaryIO, buffer: bytearray) -> int:
    """Copy the connection into sink until the peer closes."""
    view = memoryview(buffer)
    total = 0

    while True:
        try:
            n = conn.recv_into(buffer)
        except OSError as exc:
            raise RemoteIOError(f"error receiving data: {exc}") from exc
        if n == 0:
            break

        try:
            written = sink.write(view[:n])
        except OSError as exc:
            raise LocalIOError(f"error writing to stdout: {exc}") from exc
        if written is not None and written != n:
            raise LocalIOError(f"error writing to stdout: short write ({written} of {n} bytes)")
        total += n

    try:
        sink.flush()
    except OSError as exc:
        raise LocalIOError(f"error writing to stdout: {exc}") from exc
    return total


def relay(
    conn: Stream,
    direction: Direction,
    buffer: bytearray,
    source: BinaryIO,
    sink: BinaryIO,
) -> int:
    if direction is Direction.WRITE:
        total = send_stream(conn, source, buffer)
    else:
        total = receive_stream(conn, sink, buffer)
    logging.debug("relay %s finished; bytes=%d", direction.name.lower(), total)
    return total
