"""Wrap a file in a minimal HTTP response.

The output is a status line, a generic binary content type and the exact
Content-Length, CRLF line ends throughout, then the file bytes untouched.
Piped into ``mspeak swh`` this lets a plain web browser download the file.
"""
from __future__ import annotations

import io
import logging
from typing import BinaryIO

from .constants import HTTP_CONTENT_TYPE, HTTP_STATUS_LINE, IOBUFSIZE
from .errors import LocalIOError


def http_header(length: int) -> bytes:
    if length < 0:
        raise ValueError(f"negative content length: {length}")
    lines = [
        HTTP_STATUS_LINE,
        f"Content-Type: {HTTP_CONTENT_TYPE}",
        f"Content-Length: {length}",
        "",
        "",
    ]
    return "\r\n".join(lines).encode("ascii")


def measure(f: BinaryIO) -> int:
    """Size of f by seeking to the end; leaves f rewound."""
    try:
        length = f.seek(0, io.SEEK_END)
    except OSError as exc:
        raise LocalIOError(f"error seeking to end of file: {exc}") from exc
    try:
        f.seek(0, io.SEEK_SET)
    except OSError as exc:
        raise LocalIOError(f"error rewinding the file: {exc}") from exc
    return length


def frame_file(path: str, out: BinaryIO) -> int:
    """Write the header and the body of path to out; returns the body length."""
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise LocalIOError(f"couldn't open input file: {exc}") from exc

    with f:
        remaining = length = measure(f)
        logging.debug("framing %s; size=%d bytes", path, length)

        try:
            out.write(http_header(length))
        except OSError as exc:
            raise LocalIOError(f"error writing HTTP header: {exc}") from exc

        buffer = bytearray(IOBUFSIZE)
        view = memoryview(buffer)
        while remaining > 0:
            want = min(remaining, IOBUFSIZE)
            try:
                got = f.readinto(view[:want])
            except OSError as exc:
                raise LocalIOError(f"error reading from file: {exc}") from exc
            if got != want:
                raise LocalIOError("error reading from file: unexpected end of file")
            try:
                out.write(view[:want])
            except OSError as exc:
                raise LocalIOError(f"error writing to output: {exc}") from exc
            remaining -= want

    try:
        out.flush()
    except OSError as exc:
        raise LocalIOError(f"error writing to output: {exc}") from exc
    return length
