# atpnet

Building blocks for a peer-to-peer node, each usable on its own.

## Modules

- `atpnet.dht`: `Dht`, a Kademlia-style routing table with 256 buckets
  chosen by XOR distance from our 32-byte id, holding up to 8 `DhtNode`
  entries each (the oldest is evicted when a bucket is full).
  `add_or_update`, `find_closest`, `random_nodes`, `refresh_targets`,
  `cleanup`, `total_nodes` and `alive_nodes`. Liveness is judged from the
  `now` and `timeout_secs` you pass in.
- `atpnet.peer_score`: `PeerScore` keeps a reputation between -100 and 100,
  moved by events (`on_success_handshake` +10, `on_failed_handshake` -10,
  `on_valid_block` +5, `on_invalid_block` -50, `on_timeout` -5,
  `on_fast_response` +2). A negative score regains one point per ten minutes,
  up to zero. `ban`, `unban`, `is_banned`, `is_penalized`. `PeerScoring`
  holds scores by address: `get_or_create`, `get`, `top_peers`,
  `check_all_recovery`, `cleanup` and `len()`.
- `atpnet.addresses`: `socket_to_bytes((host, port))` encodes an address as
  16 bytes plus a port (IPv4 in the first four bytes, the rest zero);
  `bytes_to_socket(ip, port)` decodes it back to `(host, port)`, treating
  IPv4-mapped addresses and that IPv4 layout as IPv4.
- `atpnet.snapshots`: `SnapshotStore` keeps snapshot bytes in any mutable
  mapping under keys `utxo_snapshot_<height>`. `save_if_needed` stores only
  at multiples of 1000 and returns whether it did; `load_nearest` returns
  `(height, data)` of the newest snapshot not above a height, or `None`;
  `cleanup` deletes older ones and returns the count.
  `nearest_snapshot_height` rounds a height down to a multiple of 1000.
- `atpnet.framing`: `read_message` and `write_message` exchange messages
  prefixed by a big-endian 32-bit length over asyncio streams, with a 30 s
  timeout and a 10 MB limit. Failures raise `FramingError`,
  `FramingTimeoutError` or `MessageTooLargeError`.
- `atpnet.cipher`: `AtpCipher`, ChaCha20 with HMAC-SHA256 over numbered
  packets (index, nonce, ciphertext, tag). `decrypt` returns `None` for
  short, forged, replayed or out-of-order packets. Also `derive_hmac_key`,
  `compute_hmac`, `compute_key_confirmation`, `verify_key_confirmation`, and
  `TofuStore`, which remembers the first public key seen per address.
- `atpnet.sync`: message types `BlockHeader`, `HeaderResponse`,
  `BlockResponse` and `SoloChain`; `check_message_limits` raises
  `MessageLimitError` above 2000 headers, 500 blocks or 1000 solo-chain
  blocks; `needs_snapshot`, `header_chunk` and `update_network_height`
  make the sync decisions.
- `atpnet.sync_engine`: the `SyncState` enum, `validate_header_links`,
  `block_request_range` (at most 500 blocks) and `sync_progress`.

## Install

```
pip install .
```

## Example

```python
from atpnet.dht import Dht

dht = Dht(bytes(32))
for i in range(1, 21):
    node_id = bytes([i]) + bytes(31)
    dht.add_or_update(node_id, ("127.0.0.1", 9733), 1000)

closest = dht.find_closest(bytes([255] * 32), 8, 2000, 3600)
print(len(closest))  # 8
```

```python
from atpnet.cipher import AtpCipher

session_key = bytes(32)
sender = AtpCipher(session_key)
receiver = AtpCipher(session_key)
packet = sender.encrypt(b"hello")
assert receiver.decrypt(packet) == b"hello"
assert receiver.decrypt(packet) is None  # a replayed packet is rejected
```

## What it does not do

There is no node here: no listener or dialer, no connection or peer
management, no key-exchange handshake, no block validation and no database.
The sync modules plan requests and check messages but send nothing;
`SnapshotStore` persists only as far as the mapping you give it does.

## Tests

```
pip install ".[test]"
pytest
```