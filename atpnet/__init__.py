"""Peer-to-peer networking primitives: DHT, peer scoring, address encoding, snapshots, framing, packet cipher and sync helpers."""

__version__ = "0.1.0"

__all__ = [
    "addresses",
    "cipher",
    "dht",
    "framing",
    "peer_score",
    "snapshots",
    "sync",
    "sync_engine",
]