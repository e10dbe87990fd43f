"""Fixed-size wire encoding of peer socket addresses."""

from __future__ import annotations

import ipaddress
from typing import Tuple, Union

PeerAddr = Tuple[bytes, int]
SocketAddr = Tuple[str, int]

_MAPPED_PREFIX = bytes(10) + b"\xff\xff"


def _check_port(port: int) -> int:
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    return port


def socket_to_bytes(addr: Tuple[Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address], int]) -> PeerAddr:
    """Encode ``(host, port)`` as 16 address bytes and a port.

    IPv4 addresses occupy the first four bytes, the rest being zero.
    """
    host, port = addr
    ip = ipaddress.ip_address(host)
    _check_port(port)
    if isinstance(ip, ipaddress.IPv4Address):
        return ip.packed + bytes(12), port
    return ip.packed, port


def bytes_to_socket(ip: bytes, port: int) -> SocketAddr:
    """Decode 16 address bytes and a port into ``(host, port)``.

    IPv4-mapped addresses and the IPv4 layout produced by ``socket_to_bytes``
    decode to IPv4; anything else is IPv6.
    """
    ip = bytes(ip)
    if len(ip) != 16:
        raise ValueError(f"address must be 16 bytes, got {len(ip)}")
    _check_port(port)
    if ip[:12] == _MAPPED_PREFIX:
        return str(ipaddress.IPv4Address(ip[12:])), port
    if not any(ip[4:]):
        return str(ipaddress.IPv4Address(ip[:4])), port
    return ipaddress.IPv6Address(ip).compressed, port