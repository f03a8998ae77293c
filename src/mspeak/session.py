from __future__ import annotations

import logging
import time
from typing import BinaryIO, Callable, Optional

from .constants import IOBUFSIZE
from .endpoint import Endpoint, parse_endpoint
from .net import NetSocket, TcpSocket, establish
from .options import Mode
from .relay import Metrics, relay
from .scanner import skip_request


def speak(
    mode: Mode,
    address: str,
    source: BinaryIO,
    sink: BinaryIO,
    opener: Callable[[], NetSocket] = TcpSocket.open,
    on_listening: Optional[Callable[[Endpoint], None]] = None,
) -> Metrics:
    """Run one relay session end to end.

    Resolve the address, get the one connection, skip the request in fake
    HTTP mode, move the bytes, and always close the connection on the way
    out. Failures surface as SpeakError subclasses.
    """
    endpoint = parse_endpoint(address)
    logging.debug("mode=%s endpoint=%s", mode, endpoint)

    conn = establish(mode.role, endpoint, opener=opener, on_listening=on_listening)
    metrics = Metrics()
    try:
        buffer = bytearray(IOBUFSIZE)
        if mode.fake_http and not skip_request(conn, buffer):
            logging.info("client hung up before finishing its request")
        metrics.bytes_transferred = relay(conn, mode.direction, buffer, source, sink)
    finally:
        conn.close()

    metrics.end_ts = time.monotonic()
    logging.info(
        "done; bytes=%d seconds=%.3f throughput=%.2f MiB/s",
        metrics.bytes_transferred,
        metrics.duration_s,
        metrics.throughput_mibps,
    )
    return metrics
