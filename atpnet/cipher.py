"""Authenticated stream encryption for peer sessions and trust-on-first-use keys."""

from __future__ import annotations

import hashlib
import hmac
import struct
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

KEY_SIZE = 32
NONCE_SIZE = 12
HMAC_SIZE = 32
INDEX_SIZE = 8
PACKET_OVERHEAD = INDEX_SIZE + NONCE_SIZE + HMAC_SIZE
KDF_DOMAIN = b"aevum-v1"

_HMAC_INFO = b"hmac"
_LABEL_SHARED = "shared secret"
_LABEL_PEER = "peer public key"

_INDEX = struct.Struct("<Q")


def _check_key(key: bytes, what: str) -> bytes:
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise ValueError(f"{what} must be {KEY_SIZE} bytes, got {len(key)}")
    return key


def derive_hmac_key(secret: bytes, info: bytes) -> bytes:
    """SHA-256 over the domain tag, the secret and ``info``."""
    digest = hashlib.sha256()
    digest.update(KDF_DOMAIN)
    digest.update(bytes(secret))
    digest.update(bytes(info))
    return digest.digest()


def compute_hmac(key: bytes, index: int, nonce: bytes, ciphertext: bytes) -> bytes:
    """HMAC-SHA256 over the packet index (u64 LE), nonce and ciphertext."""
    mac = hmac.new(bytes(key), digestmod=hashlib.sha256)
    mac.update(_INDEX.pack(index))
    mac.update(bytes(nonce))
    mac.update(bytes(ciphertext))
    return mac.digest()


def compute_key_confirmation(secret: bytes, msg: bytes) -> bytes:
    """HMAC-SHA256 tag proving knowledge of ``secret`` over ``msg``."""
    return hmac.new(bytes(secret), bytes(msg), hashlib.sha256).digest()


def verify_key_confirmation(secret: bytes, msg: bytes, tag: bytes) -> bool:
    return hmac.compare_digest(compute_key_confirmation(secret, msg), bytes(tag))


def _nonce_for(index: int) -> bytes:
    # The index as a little-endian 128-bit number, cut to 12 bytes.
    return _INDEX.pack(index) + bytes(NONCE_SIZE - INDEX_SIZE)


def _keystream(key: bytes, nonce: bytes, data: bytes) -> bytes:
    # Block counter starts at zero, followed by the 96-bit nonce.
    full_nonce = bytes(4) + nonce
    return Cipher(algorithms.ChaCha20(key, full_nonce), mode=None).encryptor().update(data)


class AtpCipher:
    """ChaCha20 with HMAC-SHA256 over numbered packets; rejects replays and reordering.

    Packet layout: index (u64 LE) | nonce (12) | ciphertext | HMAC (32).
    """

    def __init__(self, shared_secret: bytes, peer_pubkey: Optional[bytes] = None) -> None:
        checked = _check_key(shared_secret, _LABEL_SHARED)
        self.shared_secret = checked
        derived = derive_hmac_key(checked, _HMAC_INFO)
        self.hmac_key = derived
        self.send_index = 0
        self.recv_index = 0
        peer = None if peer_pubkey is None else _check_key(peer_pubkey, _LABEL_PEER)
        self.peer_pubkey = peer

    def remote_static(self) -> bytes:
        """The peer's public key bytes, or 32 zero bytes if unknown."""
        return self.peer_pubkey if self.peer_pubkey is not None else bytes(KEY_SIZE)

    def encrypt(self, plaintext: bytes) -> bytes:
        self.send_index += 1
        nonce = _nonce_for(self.send_index)
        ciphertext = _keystream(self.shared_secret, nonce, bytes(plaintext))
        tag = compute_hmac(self.hmac_key, self.send_index, nonce, ciphertext)
        return _INDEX.pack(self.send_index) + nonce + ciphertext + tag

    def decrypt(self, data: bytes) -> Optional[bytes]:
        """Return the plaintext, or None if the packet is short, stale or forged."""
        data = bytes(data)
        if len(data) < PACKET_OVERHEAD:
            return None
        (index,) = _INDEX.unpack_from(data)
        nonce = data[INDEX_SIZE:INDEX_SIZE + NONCE_SIZE]
        ciphertext = data[INDEX_SIZE + NONCE_SIZE:-HMAC_SIZE]
        received = data[-HMAC_SIZE:]
        if index <= self.recv_index:
            return None
        expected = compute_hmac(self.hmac_key, index, nonce, ciphertext)
        if not hmac.compare_digest(received, expected):
            return None
        self.recv_index = index
        return _keystream(self.shared_secret, nonce, ciphertext)


class TofuStore:
    """Remembers the first public key seen for each address."""

    def __init__(self) -> None:
        self.keys: Dict[Any, bytes] = {}

    def check_or_store(self, addr: Any, pubkey: bytes) -> bool:
        """True if ``pubkey`` matches the stored key, or is stored now as the first."""
        pubkey = bytes(pubkey)
        stored = self.keys.get(addr)
        if stored is None:
            self.keys[addr] = pubkey
            return True
        return hmac.compare_digest(stored, pubkey)