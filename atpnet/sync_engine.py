"""Header-chain checks and request planning for catching up with a peer."""

from __future__ import annotations

import enum
from typing import Optional, Sequence, Tuple

from .sync import BlockHeader

MAX_BLOCKS_PER_REQUEST = 500
REQUEST_TIMEOUT_SECS = 30
MAX_RETRIES = 3
MAX_PROGRESS = 99.9
COMPLETE = 100.0


class SyncState(enum.Enum):
    """Stages of syncing a chain from a single peer."""

    IDLE = "idle"
    FETCHING_HEADERS = "fetching_headers"
    VALIDATING_CHAIN = "validating_chain"
    FETCHING_BLOCKS = "fetching_blocks"
    SYNCED = "synced"
    FAILED = "failed"


def validate_header_links(headers: Sequence[BlockHeader], last_hash: Optional[bytes]) -> bool:
    """Check that ``headers`` form one unbroken chain.

    When ``last_hash`` is given, the first header must build on it. Each later
    header must name its predecessor's hash and continue its tick range.
    An empty sequence is not a valid chain.
    """
    if not headers:
        return False
    if last_hash is not None and headers[0].prev_hash != bytes(last_hash):
        return False
    for prev, curr in zip(headers, headers[1:]):
        if curr.prev_hash != prev.block_hash:
            return False
        if curr.poh_tick_start != prev.poh_tick_end:
            return False
    return True


def block_request_range(our_height: int, peer_height: int) -> Optional[Tuple[int, int]]:
    """The next ``(from, to)`` block range to request, or None when caught up."""
    if our_height >= peer_height:
        return None
    start = our_height + 1
    return start, min(start + MAX_BLOCKS_PER_REQUEST - 1, peer_height)


def sync_progress(blocks_received: int, our_height: int, peer_height: int) -> float:
    """Percentage of the gap to the peer covered by received blocks.

    Reports 100 only once our height reaches the peer's; until then it is
    capped just below that.
    """
    if peer_height <= our_height:
        return COMPLETE
    total = peer_height - our_height
    return min(blocks_received / total * 100.0, MAX_PROGRESS)