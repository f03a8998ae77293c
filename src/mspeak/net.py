from __future__ import annotations

import logging
import socket
from typing import Callable, Optional, Protocol

from .constants import LISTEN_BACKLOG
from .endpoint import Endpoint
from .errors import EstablishError, Stage
from .options import Role


class NetSocket(Protocol):
    """What the relay needs from a stream socket.

    Every call blocks and raises OSError on failure.
    """

    def reuse_address(self) -> None: ...

    def bind(self, endpoint: Endpoint) -> None: ...

    def listen(self, backlog: int) -> None: ...

    def accept(self) -> "NetSocket": ...

    def connect(self, endpoint: Endpoint) -> None: ...

    def local_endpoint(self) -> Endpoint: ...

    def peer_endpoint(self) -> Endpoint: ...

    def send(self, data: memoryview) -> int: ...

    def recv_into(self, buffer: bytearray) -> int: ...

    def shutdown(self) -> None: ...

    def close(self) -> None: ...


class TcpSocket:
    def __init__(self, sock: socket.socket):
        self.sock = sock

    @classmethod
    def open(cls) -> "TcpSocket":
        return cls(socket.socket(socket.AF_INET, socket.SOCK_STREAM))

    def reuse_address(self) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def bind(self, endpoint: Endpoint) -> None:
        self.sock.bind(endpoint.sockaddr)

    def listen(self, backlog: int) -> None:
        self.sock.listen(backlog)

    def accept(self) -> "TcpSocket":
        conn, _ = self.sock.accept()
        return TcpSocket(conn)

    def connect(self, endpoint: Endpoint) -> None:
        self.sock.connect(endpoint.sockaddr)

    def local_endpoint(self) -> Endpoint:
        host, port = self.sock.getsockname()
        return Endpoint(host, port)

    def peer_endpoint(self) -> Endpoint:
        host, port = self.sock.getpeername()
        return Endpoint(host, port)

    def send(self, data: memoryview) -> int:
        return self.sock.send(data)

    def recv_into(self, buffer: bytearray) -> int:
        return self.sock.recv_into(buffer)

    def shutdown(self) -> None:
        self.sock.shutdown(socket.SHUT_RDWR)

    def close(self) -> None:
        self.sock.close()


def _close_quietly(sock: NetSocket) -> None:
    try:
        sock.close()
    except OSError as exc:
        logging.warning("problem closing socket: %s", exc)


class Connection:
    """The one live stream of a run.

    Owns its socket. ``close`` shuts both directions down and releases the
    socket; it only ever warns, and a second call does nothing.
    """

    def __init__(self, sock: NetSocket, peer: Optional[Endpoint] = None):
        self.sock: Optional[NetSocket] = sock
        self.peer = peer

    def _live(self) -> NetSocket:
        if self.sock is None:
            raise ValueError("connection already closed")
        return self.sock

    def send(self, data: memoryview) -> int:
        return self._live().send(data)

    def recv_into(self, buffer: bytearray) -> int:
        return self._live().recv_into(buffer)

    @property
    def closed(self) -> bool:
        return self.sock is None

    def close(self) -> None:
        sock, self.sock = self.sock, None
        if sock is None:
            return
        try:
            sock.shutdown()
        except OSError as exc:
            logging.warning("socket shutdown failed: %s", exc)
        _close_quietly(sock)


def _serve_one(
    opener: Callable[[], NetSocket],
    endpoint: Endpoint,
    on_listening: Optional[Callable[[Endpoint], None]],
) -> Connection:
    try:
        listener = opener()
    except OSError as exc:
        raise EstablishError(Stage.SOCKET, f"could not open a socket: {exc}") from exc

    try:
        try:
            listener.reuse_address()
        except OSError as exc:
            raise EstablishError(Stage.OPTION, f"could not set server socket options: {exc}") from exc
        try:
            listener.bind(endpoint)
        except OSError as exc:
            raise EstablishError(Stage.BIND, f"could not bind server socket to {endpoint}: {exc}") from exc
        try:
            listener.listen(LISTEN_BACKLOG)
            bound = listener.local_endpoint()
        except OSError as exc:
            raise EstablishError(Stage.LISTEN, f"could not listen for incoming connections: {exc}") from exc

        logging.info("listening on %s", bound)
        if on_listening is not None:
            on_listening(bound)

        try:
            sock = listener.accept()
        except OSError as exc:
            raise EstablishError(Stage.ACCEPT, f"could not accept the incoming connection: {exc}") from exc
    finally:
        # one client per run; never listen again
        _close_quietly(listener)

    try:
        peer: Optional[Endpoint] = sock.peer_endpoint()
    except OSError:
        peer = None
    logging.info("accepted connection from %s", peer)
    return Connection(sock, peer)


def _dial(opener: Callable[[], NetSocket], endpoint: Endpoint) -> Connection:
    try:
        sock = opener()
    except OSError as exc:
        raise EstablishError(Stage.SOCKET, f"could not open a socket: {exc}") from exc

    try:
        sock.connect(endpoint)
    except OSError as exc:
        _close_quietly(sock)
        raise EstablishError(Stage.CONNECT, f"could not connect to {endpoint}: {exc}") from exc

    logging.info("connected to %s", endpoint)
    return Connection(sock, endpoint)


def establish(
    role: Role,
    endpoint: Endpoint,
    opener: Callable[[], NetSocket] = TcpSocket.open,
    on_listening: Optional[Callable[[Endpoint], None]] = None,
) -> Connection:
    """Produce the run's single connection.

    A server binds, listens with a backlog of one, accepts exactly one
    client and drops the listener. A client dials once. Any failure raises
    EstablishError naming the stage; nothing is retried.
    """
    if role is Role.SERVER:
        return _serve_one(opener, endpoint, on_listening)
    return _dial(opener, endpoint)
