from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Tuple

from .constants import MAX_ADDRESS_LEN, MAX_PORT
from .errors import EndpointError

_HOST_CHARS = frozenset("0123456789.")
_DIGITS = "0123456789"


@dataclass(frozen=True, slots=True)
class Endpoint:
    address: str
    port: int

    @property
    def sockaddr(self) -> Tuple[str, int]:
        return (self.address, self.port)

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


def _parse_port(text: str) -> int:
    port = 0
    for ch in text:
        digit = _DIGITS.find(ch)
        if digit < 0:
            raise EndpointError(f"port is not numeric: {text!r}")
        if port > MAX_PORT // 10:
            raise EndpointError(f"port out of range: {text!r}")
        port = port * 10 + digit
        if port > MAX_PORT:
            raise EndpointError(f"port out of range: {text!r}")
    return port


def parse_endpoint(text: str) -> Endpoint:
    """Turn ``"a.b.c.d:port"`` into an Endpoint.

    Only numeric IPv4 addresses are accepted; host names are rejected
    rather than looked up.
    """
    if len(text) > MAX_ADDRESS_LEN:
        raise EndpointError(f"address longer than {MAX_ADDRESS_LEN} characters")

    host, sep, port_text = text.partition(":")
    if not sep:
        raise EndpointError("address has no port")
    if not host or not port_text:
        raise EndpointError("address or port is empty")
    if any(ch not in _HOST_CHARS for ch in host):
        raise EndpointError(f"address is not numeric IPv4: {host!r}")

    port = _parse_port(port_text)

    try:
        infos = socket.getaddrinfo(
            host,
            port,
            socket.AF_INET,
            socket.SOCK_STREAM,
            socket.IPPROTO_TCP,
            socket.AI_NUMERICHOST,
        )
    except socket.gaierror as exc:
        raise EndpointError(f"address is not valid: {host!r}") from exc
    if not infos:
        raise EndpointError(f"address is not valid: {host!r}")

    # several candidates are possible in principle; the first one wins
    _family, _type, _proto, _canon, sockaddr = infos[0]
    return Endpoint(address=sockaddr[0], port=sockaddr[1])
