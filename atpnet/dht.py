"""Kademlia-style routing table keyed by XOR distance."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any, Iterable, List

K_BUCKETS = 256
K = 8
ID_LENGTH = 32


@dataclass
class DhtNode:
    """A known node: its identifier, network address and last-seen time."""

    node_id: bytes
    addr: Any
    last_seen: int


def _check_id(node_id: bytes) -> bytes:
    node_id = bytes(node_id)
    if len(node_id) != ID_LENGTH:
        raise ValueError(f"node id must be {ID_LENGTH} bytes, got {len(node_id)}")
    return node_id


def _distance(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def _bucket_index(distance: bytes) -> int:
    """Bucket for a distance, chosen by the highest set bit of its first non-zero byte."""
    for i, byte in enumerate(distance):
        if byte:
            return min(i * 8 + byte.bit_length() - 1, K_BUCKETS - 1)
    return 0


def _alive(node: DhtNode, now: int, timeout_secs: int) -> bool:
    return now - node.last_seen < timeout_secs


class Dht:
    """Routing table of up to K nodes per bucket, bucketed by XOR distance from our id."""

    def __init__(self, our_id: bytes) -> None:
        self.our_id = _check_id(our_id)
        self._buckets: List[List[DhtNode]] = [[] for _ in range(K_BUCKETS)]

    def _all_nodes(self) -> Iterable[DhtNode]:
        for bucket in self._buckets:
            yield from bucket

    def add_or_update(self, node_id: bytes, addr: Any, now: int) -> None:
        """Insert a node, refresh it if known, or evict the oldest when the bucket is full."""
        node_id = _check_id(node_id)
        if node_id == self.our_id:
            return
        bucket = self._buckets[_bucket_index(_distance(self.our_id, node_id))]

        for existing in bucket:
            if existing.node_id == node_id:
                existing.addr = addr
                existing.last_seen = now
                return

        node = DhtNode(node_id=node_id, addr=addr, last_seen=now)
        if len(bucket) < K:
            bucket.append(node)
        else:
            bucket.sort(key=lambda n: n.last_seen)
            bucket[0] = node

    def find_closest(self, target_id: bytes, count: int, now: int, timeout_secs: int) -> List[DhtNode]:
        """Return up to ``count`` live nodes nearest to ``target_id`` by XOR distance."""
        target_id = _check_id(target_id)
        target_idx = _bucket_index(_distance(target_id, self.our_id))

        closest: List[DhtNode] = []
        left, right = target_idx, target_idx + 1
        while len(closest) < count and (left >= 0 or right < K_BUCKETS):
            if left >= 0:
                closest.extend(replace(n) for n in self._buckets[left] if _alive(n, now, timeout_secs))
                left -= 1
            if right < K_BUCKETS:
                closest.extend(replace(n) for n in self._buckets[right] if _alive(n, now, timeout_secs))
                right += 1

        closest.sort(key=lambda n: _distance(n.node_id, target_id))
        return closest[:count]

    def random_nodes(self, count: int, now: int, timeout_secs: int) -> List[DhtNode]:
        """Return up to ``count`` live nodes in random order."""
        alive = [replace(n) for n in self._all_nodes() if _alive(n, now, timeout_secs)]
        random.shuffle(alive)
        return alive[:count]

    def refresh_targets(self) -> List[bytes]:
        """One random node id from each non-empty bucket."""
        return [random.choice(bucket).node_id for bucket in self._buckets if bucket]

    def cleanup(self, now: int, timeout_secs: int) -> None:
        """Drop nodes not seen within ``timeout_secs``."""
        for bucket in self._buckets:
            bucket[:] = [n for n in bucket if _alive(n, now, timeout_secs)]

    def total_nodes(self) -> int:
        return sum(len(bucket) for bucket in self._buckets)

    def alive_nodes(self, now: int, timeout_secs: int) -> int:
        return sum(1 for n in self._all_nodes() if _alive(n, now, timeout_secs))