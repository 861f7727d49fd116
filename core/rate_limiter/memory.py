import asyncio
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional


@dataclass
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: Optional[float] = None


class InMemoryRateLimiter:
    """Sliding window request counter kept in process memory.

    State is per process and lost on restart, which is acceptable for
    throttling the public endpoints of a single small deployment.
    """

    def __init__(self):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    def _evict(self, key: str, now: float, window: int) -> Deque[float]:
        hits = self._hits[key]
        while hits and hits[0] <= now - window:
            hits.popleft()
        return hits

    async def hit(
        self, key: str, limit: int, window: int, now: Optional[float] = None
    ) -> RateLimitDecision:
        """Record one request for ``key`` if it still fits in the window."""
        async with self._lock:
            now = time.monotonic() if now is None else now
            hits = self._evict(key, now, window)

            if len(hits) < limit:
                hits.append(now)
                return RateLimitDecision(allowed=True, remaining=limit - len(hits))

            retry_after = window - (now - hits[0])
            return RateLimitDecision(
                allowed=False, remaining=0, retry_after=max(0.0, retry_after)
            )

    async def reset(self, key: Optional[str] = None) -> None:
        """Forget one key, or everything when no key is given"""
        async with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)

    async def cleanup_expired(self, window: int, now: Optional[float] = None) -> None:
        async with self._lock:
            now = time.monotonic() if now is None else now
            for key in list(self._hits):
                if not self._evict(key, now, window):
                    del self._hits[key]
