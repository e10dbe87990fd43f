"""Periodic state snapshots kept in a metadata key-value store."""

from __future__ import annotations

import logging
from typing import MutableMapping, Optional, Tuple

SNAPSHOT_INTERVAL = 1000
SNAPSHOT_KEY_PREFIX = "utxo_snapshot_"

log = logging.getLogger(__name__)


def nearest_snapshot_height(height: int) -> int:
    """The highest snapshot height not above ``height``."""
    if height < 0:
        raise ValueError("height must not be negative")
    return (height // SNAPSHOT_INTERVAL) * SNAPSHOT_INTERVAL


def _key(height: int) -> str:
    return f"{SNAPSHOT_KEY_PREFIX}{height}"


class SnapshotStore:
    """Saves, finds and prunes snapshots in a mapping of metadata keys to bytes."""

    def __init__(self, metadata: MutableMapping[str, bytes]) -> None:
        self._metadata = metadata

    def save_if_needed(self, height: int, data: bytes) -> bool:
        """Store ``data`` when ``height`` is a multiple of the interval; report whether it was."""
        if height % SNAPSHOT_INTERVAL != 0:
            return False
        self._metadata[_key(height)] = bytes(data)
        log.info("state snapshot saved at height %d", height)
        return True

    def load_nearest(self, max_height: int) -> Optional[Tuple[int, bytes]]:
        """Return ``(height, data)`` of the newest snapshot not above ``max_height``."""
        for height in range(nearest_snapshot_height(max_height), -1, -SNAPSHOT_INTERVAL):
            data = self._metadata.get(_key(height))
            if data is not None:
                log.info("state snapshot loaded from height %d", height)
                return height, data
        return None

    def cleanup(self, current_height: int) -> int:
        """Delete snapshots below the latest one; return how many were removed."""
        keep_height = nearest_snapshot_height(current_height)
        removed = 0
        for height in range(0, keep_height, SNAPSHOT_INTERVAL):
            key = _key(height)
            if key in self._metadata:
                del self._metadata[key]
                removed += 1
        if removed:
            log.info("cleaned up %d old state snapshots", removed)
        return removed