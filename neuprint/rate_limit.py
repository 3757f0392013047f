"""
Rate Limiter — Sliding Window per API Key

In-memory, per process. Requests without a key ID (dev mode) are never
limited. The number of tracked keys is bounded; the least recently
seen key is evicted first.

Limits: NEUPRINT_RATE_PER_MINUTE (60), NEUPRINT_RATE_PER_HOUR (1000).
NEUPRINT_RATE_LIMIT=false turns limiting off.
"""

from __future__ import annotations

import os
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional

from fastapi import HTTPException

MAX_TRACKED_KEYS = 5000


@dataclass(frozen=True)
class RateLimits:
    per_minute: int = 60
    per_hour: int = 1000


@dataclass
class RateWindow:
    timestamps: list[float] = field(default_factory=list)

    def prune(self, now: float, horizon: float) -> None:
        cutoff = now - horizon
        self.timestamps = [t for t in self.timestamps if t > cutoff]

    def count_since(self, cutoff: float) -> int:
        return sum(1 for t in self.timestamps if t > cutoff)


class RateLimiter:
    def __init__(
        self,
        limits: Optional[RateLimits] = None,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
        max_keys: int = MAX_TRACKED_KEYS,
    ):
        self.limits = limits or RateLimits()
        self.enabled = enabled
        self._clock = clock
        self._max_keys = max_keys
        self._windows: OrderedDict[str, RateWindow] = OrderedDict()
        self._lock = threading.Lock()

    def check(self, key_id: Optional[str]) -> None:
        """Record one request for key_id, or raise HTTPException 429."""
        if not self.enabled or key_id is None:
            return

        with self._lock:
            now = self._clock()
            window = self._windows.get(key_id)
            if window is None:
                if len(self._windows) >= self._max_keys:
                    self._windows.popitem(last=False)
                window = self._windows[key_id] = RateWindow()
            else:
                self._windows.move_to_end(key_id)

            window.prune(now, 3600)

            if window.count_since(now - 60) >= self.limits.per_minute:
                retry = max(1, 60 - int(now % 60))
                raise HTTPException(
                    status_code=429,
                    detail=f"Rate limit exceeded: {self.limits.per_minute} requests/minute.",
                    headers={"Retry-After": str(retry)},
                )
            if len(window.timestamps) >= self.limits.per_hour:
                raise HTTPException(
                    status_code=429,
                    detail=f"Rate limit exceeded: {self.limits.per_hour} requests/hour.",
                    headers={"Retry-After": "3600"},
                )

            window.timestamps.append(now)

    def usage(self, key_id: str) -> dict:
        with self._lock:
            window = self._windows.get(key_id)
            if window is None:
                return {"minute": 0, "hour": 0}
            now = self._clock()
            return {
                "minute": window.count_since(now - 60),
                "hour": window.count_since(now - 3600),
            }

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


rate_limiter = RateLimiter(
    limits=RateLimits(
        per_minute=int(os.getenv("NEUPRINT_RATE_PER_MINUTE", "60")),
        per_hour=int(os.getenv("NEUPRINT_RATE_PER_HOUR", "1000")),
    ),
    enabled=os.getenv("NEUPRINT_RATE_LIMIT", "true").lower() == "true",
)


def check_rate_limit(key_id: Optional[str]) -> None:
    rate_limiter.check(key_id)
