from __future__ import annotations

import io

import pytest

from mspeak.constants import IOBUFSIZE
from mspeak.errors import LocalIOError, RemoteIOError
from mspeak.options import Direction
from mspeak.relay import Metrics, receive_stream, relay, send_stream


class FakeConn:
    def __init__(self, incoming=b"", chunk=IOBUFSIZE, short_send=False, send_error=None, recv_error=None):
        self.incoming = incoming
        self.chunk = chunk
        self.short_send = short_send
        self.send_error = send_error
        self.recv_error = recv_error
        self.sent: list[bytes] = []

    def send(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(bytes(data))
        return len(data) - 1 if self.short_send else len(data)

    def recv_into(self, buffer):
        if not self.incoming and self.recv_error is not None:
            raise self.recv_error
        n = min(self.chunk, len(buffer), len(self.incoming))
        buffer[:n] = self.incoming[:n]
        self.incoming = self.incoming[n:]
        return n


class BrokenIO(io.RawIOBase):
    def readable(self):
        return True

    def writable(self):
        return True

    def readinto(self, b):
        raise OSError("disk on fire")

    def write(self, b):
        raise OSError("disk on fire")


class HalfWriter(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        return len(b) // 2


@pytest.mark.parametrize("size", [0, 1, IOBUFSIZE - 1, IOBUFSIZE, IOBUFSIZE + 1, 3 * IOBUFSIZE])
def test_send_stream_chunks(size):
    payload = bytes(i % 251 for i in range(size))
    conn = FakeConn()
    assert send_stream(conn, io.BytesIO(payload), bytearray(IOBUFSIZE)) == size
    assert b"".join(conn.sent) == payload
    assert all(len(c) == IOBUFSIZE for c in conn.sent[:-1])
    assert all(conn.sent)


def test_send_stream_partial_read_ends_input():
    class Trickle(io.RawIOBase):
        def __init__(self):
            self.parts = [b"abc", b"def"]

        def readable(self):
            return True

        def readinto(self, b):
            part = self.parts.pop(0) if self.parts else b""
            b[: len(part)] = part
            return len(part)

    conn = FakeConn()
    assert send_stream(conn, Trickle(), bytearray(IOBUFSIZE)) == 3
    assert conn.sent == [b"abc"]


def test_send_stream_short_send_is_fatal():
    with pytest.raises(RemoteIOError, match="short send"):
        send_stream(FakeConn(short_send=True), io.BytesIO(b"x" * 10), bytearray(IOBUFSIZE))


def test_send_stream_send_error():
    with pytest.raises(RemoteIOError):
        send_stream(FakeConn(send_error=BrokenPipeError()), io.BytesIO(b"x"), bytearray(IOBUFSIZE))


def test_send_stream_stdin_error():
    with pytest.raises(LocalIOError, match="stdin"):
        send_stream(FakeConn(), BrokenIO(), bytearray(IOBUFSIZE))


def test_receive_stream_no_stale_bytes():
    # first chunk fills the buffer, second only partly
    payload = b"A" * IOBUFSIZE + b"BC"
    out = io.BytesIO()
    assert receive_stream(FakeConn(incoming=payload), out, bytearray(IOBUFSIZE)) == len(payload)
    assert out.getvalue() == payload


def test_receive_stream_small_reads():
    payload = bytes(range(256)) * 40
    out = io.BytesIO()
    receive_stream(FakeConn(incoming=payload, chunk=7), out, bytearray(IOBUFSIZE))
    assert out.getvalue() == payload


def test_receive_stream_recv_error():
    with pytest.raises(RemoteIOError, match="receiving"):
        receive_stream(FakeConn(incoming=b"abc", recv_error=ConnectionResetError()), io.BytesIO(), bytearray(16))


def test_receive_stream_write_error():
    with pytest.raises(LocalIOError):
        receive_stream(FakeConn(incoming=b"abc"), BrokenIO(), bytearray(16))


def test_receive_stream_short_write():
    with pytest.raises(LocalIOError, match="short write"):
        receive_stream(FakeConn(incoming=b"abcd"), HalfWriter(), bytearray(16))


def test_relay_dispatches_on_direction():
    conn = FakeConn(incoming=b"from peer")
    source, sink = io.BytesIO(b"to peer"), io.BytesIO()
    assert relay(conn, Direction.READ, bytearray(IOBUFSIZE), source, sink) == 9
    assert sink.getvalue() == b"from peer"
    assert conn.sent == []

    assert relay(conn, Direction.WRITE, bytearray(IOBUFSIZE), source, sink) == 7
    assert conn.sent == [b"to peer"]


def test_metrics():
    m = Metrics(bytes_transferred=1024 * 1024, start_ts=10.0)
    assert m.duration_s == 0.0
    assert m.throughput_mibps == 0.0
    m.end_ts = 12.0
    assert m.duration_s == 2.0
    assert m.throughput_mibps == 0.5
