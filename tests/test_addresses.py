import pytest

from atpnet.addresses import bytes_to_socket, socket_to_bytes


def test_ipv4_roundtrip():
    addr = ("192.168.1.1", 9733)
    ip, port = socket_to_bytes(addr)
    assert bytes_to_socket(ip, port) == addr


def test_ipv6_roundtrip():
    addr = ("::1", 9733)
    ip, port = socket_to_bytes(addr)
    assert bytes_to_socket(ip, port) == addr


def test_ipv4_layout():
    assert socket_to_bytes(("192.168.1.1", 9733)) == (bytes([192, 168, 1, 1]) + bytes(12), 9733)


def test_ipv6_layout():
    ip, port = socket_to_bytes(("::1", 80))
    assert ip == bytes(15) + b"\x01"
    assert port == 80


def test_mapped_address_decodes_to_ipv4():
    raw = bytes(10) + b"\xff\xff" + bytes([10, 0, 0, 1])
    assert bytes_to_socket(raw, 80) == ("10.0.0.1", 80)


def test_full_ipv6_roundtrip():
    addr = ("2001:db8::42", 443)
    assert bytes_to_socket(*socket_to_bytes(addr)) == addr


def test_bad_length_rejected():
    with pytest.raises(ValueError):
        bytes_to_socket(b"\x00" * 4, 80)


def test_bad_port_rejected():
    with pytest.raises(ValueError):
        socket_to_bytes(("10.0.0.1", 70000))


def test_bad_host_rejected():
    with pytest.raises(ValueError):
        socket_to_bytes(("not-an-ip", 80))