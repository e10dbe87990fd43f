"""Peer reputation tracking with passive recovery and temporary bans."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

SCORE_MIN = -100
SCORE_MAX = 100
RECOVERY_INTERVAL_SECS = 600
MAX_IDLE_SECS = 3600.0


class PeerScore:
    """Reputation of one peer, from -100 (worst) to 100 (best)."""

    def __init__(self, addr: Any) -> None:
        now = time.monotonic()
        self.addr = addr
        self.score = 0
        self.success_handshakes = 0
        self.failed_handshakes = 0
        self.valid_blocks = 0
        self.invalid_blocks = 0
        self.timeouts = 0
        self.last_seen = now
        self.last_score_update = now
        self.banned_until: Optional[float] = None

    def __repr__(self) -> str:
        return f"PeerScore(addr={self.addr!r}, score={self.score})"

    def on_success_handshake(self) -> None:
        self.success_handshakes += 1
        self.add_score(10)

    def on_failed_handshake(self) -> None:
        self.failed_handshakes += 1
        self.add_score(-10)

    def on_valid_block(self) -> None:
        self.valid_blocks += 1
        self.add_score(5)

    def on_invalid_block(self) -> None:
        self.invalid_blocks += 1
        self.add_score(-50)

    def on_timeout(self) -> None:
        self.timeouts += 1
        self.add_score(-5)

    def on_fast_response(self) -> None:
        self.add_score(2)

    def add_score(self, delta: int) -> None:
        """Apply pending recovery, then add ``delta`` clamped to the score range."""
        self._recover_passive()
        self.score = max(SCORE_MIN, min(SCORE_MAX, self.score + delta))
        now = time.monotonic()
        self.last_seen = now
        self.last_score_update = now

    def _recover_passive(self) -> None:
        # A negative score regains one point per ten minutes, up to zero.
        if self.score >= 0:
            return
        elapsed = int(time.monotonic() - self.last_score_update)
        intervals = elapsed // RECOVERY_INTERVAL_SECS
        if intervals > 0:
            self.score = min(self.score + intervals, 0)
            self.last_score_update = time.monotonic()

    def check_recovery(self) -> None:
        self._recover_passive()

    def is_banned(self) -> bool:
        return self.banned_until is not None and time.monotonic() < self.banned_until

    def is_penalized(self) -> bool:
        return self.score < 0

    def ban(self, duration_secs: float) -> None:
        self.banned_until = time.monotonic() + duration_secs

    def unban(self) -> None:
        self.banned_until = None


class PeerScoring:
    """Reputation records for all peers, keyed by address."""

    def __init__(self) -> None:
        self._scores: Dict[Any, PeerScore] = {}
        self.max_idle = MAX_IDLE_SECS

    def get_or_create(self, addr: Any) -> PeerScore:
        score = self._scores.get(addr)
        if score is None:
            score = self._scores[addr] = PeerScore(addr)
        return score

    def get(self, addr: Any) -> Optional[PeerScore]:
        return self._scores.get(addr)

    def top_peers(self, n: int) -> List[Any]:
        """Addresses of the ``n`` best peers that are neither banned nor penalized."""
        eligible = [p for p in self._scores.values() if not p.is_banned() and not p.is_penalized()]
        eligible.sort(key=lambda p: -p.score)
        return [p.addr for p in eligible[:n]]

    def check_all_recovery(self) -> None:
        for score in self._scores.values():
            score.check_recovery()

    def cleanup(self) -> None:
        """Drop expired bans and idle peers with a neutral score."""
        now = time.monotonic()

        def keep(s: PeerScore) -> bool:
            if s.is_banned() and (s.banned_until is None or now > s.banned_until):
                return False
            if s.score == 0 and now - s.last_seen > self.max_idle:
                return False
            return True

        self._scores = {addr: s for addr, s in self._scores.items() if keep(s)}

    def __len__(self) -> int:
        return len(self._scores)