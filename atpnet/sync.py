"""Chain-sync message types and the limits and decisions applied to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

MAX_HEADERS_PER_REQUEST = 2000
MAX_BLOCKS_PER_RESPONSE = 500
MAX_SOLO_CHAIN_BLOCKS = 1000
MAX_NETWORK_HEIGHT_JUMP = 10000
SNAPSHOT_MIN_HEIGHT = 100
SNAPSHOT_FAR_BEHIND = 10000
SNAPSHOT_BEHIND = 1000
SNAPSHOT_LOW_HEIGHT = 5000

HASH_SIZE = 32


def _check_hash(value: bytes, what: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH_SIZE:
        raise ValueError(f"{what} must be {HASH_SIZE} bytes, got {len(value)}")
    return value


@dataclass(frozen=True)
class BlockHeader:
    """Summary of one block as exchanged during header sync."""

    height: int
    block_hash: bytes
    prev_hash: bytes
    poh_tick_start: int
    poh_tick_end: int
    state_root: bytes
    total_supply: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_hash", _check_hash(self.block_hash, "block hash"))
        object.__setattr__(self, "prev_hash", _check_hash(self.prev_hash, "previous hash"))
        object.__setattr__(self, "state_root", _check_hash(self.state_root, "state root"))


@dataclass
class HeaderResponse:
    """Headers sent in reply to a header request."""

    headers: List[BlockHeader] = field(default_factory=list)


@dataclass
class BlockResponse:
    """Serialized blocks, keyed by height, sent in reply to a block request."""

    request_id: int
    blocks: List[Tuple[int, bytes]] = field(default_factory=list)


@dataclass
class SoloChain:
    """A peer's whole chain of serialized blocks, sent to resolve a fork."""

    blocks: List[Tuple[int, bytes]] = field(default_factory=list)


class MessageLimitError(ValueError):
    """A message carries more items than the protocol allows."""


def check_message_limits(msg: object) -> None:
    """Raise MessageLimitError if ``msg`` carries too many headers or blocks."""
    if isinstance(msg, HeaderResponse) and len(msg.headers) > MAX_HEADERS_PER_REQUEST:
        raise MessageLimitError("too many headers")
    if isinstance(msg, BlockResponse) and len(msg.blocks) > MAX_BLOCKS_PER_RESPONSE:
        raise MessageLimitError("too many blocks")
    if isinstance(msg, SoloChain) and len(msg.blocks) > MAX_SOLO_CHAIN_BLOCKS:
        raise MessageLimitError("too many solo blocks")


def needs_snapshot(my_height: int, peer_height: int) -> bool:
    """Whether catching up to ``peer_height`` should start from a state snapshot."""
    diff = max(peer_height - my_height, 0)
    return (
        my_height == 0
        or my_height < SNAPSHOT_MIN_HEIGHT
        or diff > SNAPSHOT_FAR_BEHIND
        or (diff > SNAPSHOT_BEHIND and my_height < SNAPSHOT_LOW_HEIGHT)
    )


def header_chunk(start: int, end: int) -> Tuple[int, int, Optional[int]]:
    """The next header request covering ``start..=end``.

    Returns ``(from, to, next_from)``; ``next_from`` is None when this request
    reaches ``end``, otherwise it is where the following chunk begins.
    """
    if end - start <= MAX_HEADERS_PER_REQUEST:
        return start, end, None
    chunk_end = start + MAX_HEADERS_PER_REQUEST
    return start, chunk_end, chunk_end + 1


def update_network_height(current: int, peer_height: int) -> int:
    """Raise the known network height to ``peer_height`` unless the jump is implausible."""
    if peer_height > current and peer_height - current < MAX_NETWORK_HEIGHT_JUMP:
        return peer_height
    return current