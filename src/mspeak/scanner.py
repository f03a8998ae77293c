"""Skip an HTTP request without parsing it.

A browser sends its request and then waits. In fake HTTP mode the server
reads until two line feeds in a row (carriage returns ignored) and only then
starts writing, so whatever it writes is taken as the response.

This is a byte pattern match, not HTTP. A client that never sends a blank
line (HTTP/0.9, or one that stalls) leaves the server waiting forever.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .constants import ASCII_CR, ASCII_LF
from .errors import RemoteIOError


class Receiver(Protocol):
    def recv_into(self, buffer: bytearray) -> int: ...


@dataclass(slots=True)
class ScanState:
    after_line_break: bool = False


def scan(chunk: bytes | bytearray | memoryview, state: ScanState) -> int:
    """Return the index of the terminating line feed in chunk, or -1.

    state carries the "last byte was a line break" bit into the next call,
    since the blank line may be split across two reads. Bytes after the
    returned index are never looked at.
    """
    for i, byte in enumerate(chunk):
        if byte == ASCII_CR:
            continue
        if byte == ASCII_LF:
            if state.after_line_break:
                return i
            state.after_line_break = True
        else:
            state.after_line_break = False
    return -1


def skip_request(conn: Receiver, buffer: bytearray) -> bool:
    """Read and drop the peer's request.

    Returns True once the blank line was seen (the rest of that read is
    discarded) and False if the peer closed before sending one.
    """
    state = ScanState()
    view = memoryview(buffer)
    skipped = 0

    while True:
        try:
            n = conn.recv_into(buffer)
        except OSError as exc:
            raise RemoteIOError(f"read error during fake HTTP handling: {exc}") from exc
        if n == 0:
            logging.debug("peer closed before end of request; skipped=%d", skipped)
            return False

        end = scan(view[:n], state)
        if end >= 0:
            logging.debug("end of request found; skipped=%d", skipped + end + 1)
            return True
        skipped += n
