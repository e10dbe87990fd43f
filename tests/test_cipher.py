import pytest

from atpnet.cipher import (
    PACKET_OVERHEAD,
    AtpCipher,
    TofuStore,
    compute_hmac,
    compute_key_confirmation,
    derive_hmac_key,
    verify_key_confirmation,
)

SECRET = bytes(range(32))
OTHER_SECRET = bytes(range(1, 33))


def test_round_trip():
    sender = AtpCipher(SECRET)
    receiver = AtpCipher(SECRET)
    for msg in (b"hello", b"", bytes(range(256)) * 10):
        assert receiver.decrypt(sender.encrypt(msg)) == msg


def test_packet_layout():
    cipher = AtpCipher(SECRET)
    packet = cipher.encrypt(b"abc")
    assert len(packet) == PACKET_OVERHEAD + 3
    assert packet[:8] == b"\x01" + bytes(7)
    assert packet[8:20] == b"\x01" + bytes(11)
    second = cipher.encrypt(b"abc")
    assert second[:8] == b"\x02" + bytes(7)
    assert cipher.send_index == 2


def test_ciphertext_differs_from_plaintext():
    packet = AtpCipher(SECRET).encrypt(b"plain message")
    assert packet[20:-32] != b"plain message"
    assert len(packet[20:-32]) == len(b"plain message")


def test_encryption_is_deterministic_for_same_secret_and_index():
    first = AtpCipher(SECRET).encrypt(b"data")
    second = AtpCipher(SECRET).encrypt(b"data")
    assert len(first) == PACKET_OVERHEAD + 4
    assert first[:8] == b"\x01" + bytes(7)
    assert second[:8] == b"\x01" + bytes(7)
    assert first == second
    assert AtpCipher(SECRET).decrypt(first) == b"data"


def test_replay_rejected():
    sender = AtpCipher(SECRET)
    receiver = AtpCipher(SECRET)
    packet = sender.encrypt(b"once")
    assert receiver.decrypt(packet) == b"once"
    assert receiver.decrypt(packet) is None


def test_older_packet_rejected_after_newer():
    sender = AtpCipher(SECRET)
    receiver = AtpCipher(SECRET)
    first = sender.encrypt(b"one")
    second = sender.encrypt(b"two")
    assert receiver.decrypt(second) == b"two"
    assert receiver.decrypt(first) is None
    assert receiver.recv_index == 2


def test_tampered_packet_rejected_without_advancing():
    sender = AtpCipher(SECRET)
    receiver = AtpCipher(SECRET)
    packet = bytearray(sender.encrypt(b"payload"))
    packet[22] ^= 0x01
    assert receiver.decrypt(bytes(packet)) is None
    assert receiver.recv_index == 0


def test_wrong_secret_rejected():
    packet = AtpCipher(SECRET).encrypt(b"payload")
    assert AtpCipher(OTHER_SECRET).decrypt(packet) is None


def test_short_packet_rejected():
    assert AtpCipher(SECRET).decrypt(bytes(PACKET_OVERHEAD - 1)) is None


def test_secret_length_checked():
    with pytest.raises(ValueError):
        AtpCipher(bytes(31))


def test_remote_static():
    assert AtpCipher(SECRET).remote_static() == bytes(32)
    assert AtpCipher(SECRET, OTHER_SECRET).remote_static() == OTHER_SECRET


def test_derive_hmac_key_depends_on_info_and_secret():
    key = derive_hmac_key(SECRET, b"hmac")
    assert len(key) == 32
    assert key == derive_hmac_key(SECRET, b"hmac")
    assert key != derive_hmac_key(SECRET, b"other")
    assert key != derive_hmac_key(OTHER_SECRET, b"hmac")


def test_packet_tag_matches_compute_hmac():
    cipher = AtpCipher(SECRET)
    packet = cipher.encrypt(b"xyz")
    assert packet[-32:] == compute_hmac(cipher.hmac_key, 1, packet[8:20], packet[20:-32])


def test_key_confirmation():
    msg = bytes(64)
    tag = compute_key_confirmation(SECRET, msg)
    assert len(tag) == 32
    assert verify_key_confirmation(SECRET, msg, tag)
    assert not verify_key_confirmation(OTHER_SECRET, msg, tag)
    assert not verify_key_confirmation(SECRET, b"\x01" + msg[1:], tag)


def test_tofu_store():
    store = TofuStore()
    addr = ("127.0.0.1", 9733)
    assert store.check_or_store(addr, SECRET)
    assert store.check_or_store(addr, SECRET)
    assert not store.check_or_store(addr, OTHER_SECRET)
    assert store.check_or_store(("127.0.0.2", 9733), OTHER_SECRET)
    assert store.keys[addr] == SECRET