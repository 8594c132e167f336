"""
In-process token-bucket rate limiting.

Each key (typically a client IP) owns a bucket that starts full and refills
continuously at ``refill_tokens`` per ``refill_interval`` seconds. Refill is
computed when a request arrives, so there is no background timer and the
clock can be swapped for a fake one in tests.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

Clock = Callable[[], float]


@dataclass
class TokenBucket:
    """
    Bucket state for one key.

    Invariant: 0 <= tokens <= capacity
    """

    capacity: int
    refill_tokens: float
    refill_interval: float
    tokens: float
    last_refill: float

    def refill(self, now: float) -> None:
        """Credit tokens for the time elapsed since the last refill."""
        elapsed = now - self.last_refill
        # A clock that steps backwards credits nothing and keeps the old mark
        if elapsed <= 0:
            return
        self.tokens = min(
            float(self.capacity),
            self.tokens + elapsed / self.refill_interval * self.refill_tokens,
        )
        self.last_refill = now

    def try_consume(self, now: float, cost: int = 1) -> bool:
        self.refill(now)
        if self.tokens >= cost:
            self.tokens -= cost
            return True
        return False

    def seconds_until(self, cost: int = 1) -> float:
        """Seconds until ``cost`` tokens will be available (0 if already)."""
        if cost > self.capacity:
            return math.inf
        missing = cost - self.tokens
        if missing <= 0:
            return 0.0
        return missing / self.refill_tokens * self.refill_interval


class RateLimiter:
    """
    Keyed token buckets with one lock per key.

    Concurrent calls for the same key are serialized so a bucket is never
    refilled twice for the same interval or driven below zero. Calls for
    different keys take different locks. Buckets are created lazily and kept
    for the life of the limiter.
    """

    def __init__(
        self,
        capacity: int,
        refill_tokens: float,
        refill_interval: float,
        clock: Clock = time.monotonic,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if refill_tokens <= 0 or refill_interval <= 0:
            raise ValueError("refill rate must be positive")
        self.capacity = capacity
        self.refill_tokens = refill_tokens
        self.refill_interval = refill_interval
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._locks: dict[str, threading.Lock] = {}
        # Guards creation of per-key locks only
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock

    def _bucket_for(self, key: str, now: float) -> TokenBucket:
        # Caller holds the key's lock
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = TokenBucket(
                capacity=self.capacity,
                refill_tokens=self.refill_tokens,
                refill_interval=self.refill_interval,
                tokens=float(self.capacity),
                last_refill=now,
            )
            self._buckets[key] = bucket
        return bucket

    def try_consume(self, key: str, cost: int = 1) -> bool:
        """
        Take ``cost`` tokens from ``key``'s bucket.

        Returns:
            True if the tokens were taken, False if the bucket is short
        """
        if cost <= 0:
            raise ValueError("cost must be positive")
        with self._lock_for(key):
            now = self._clock()
            return self._bucket_for(key, now).try_consume(now, cost)

    def retry_after(self, key: str, cost: int = 1) -> float:
        """Seconds until a call of ``cost`` for ``key`` could succeed."""
        with self._lock_for(key):
            now = self._clock()
            bucket = self._bucket_for(key, now)
            bucket.refill(now)
            return bucket.seconds_until(cost)
