"""Admission control for the registration endpoint.

A policy is consulted once per submission, keyed by caller address, before any
validation runs. Two policies ship: an in-process sliding window (default, one
process) and a Redis fixed window (shared by every API worker).
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0  # seconds until the caller may try again


class AdmissionPolicy:
    def hit(self, key: str) -> AdmissionDecision:
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemoryWindowLimiter(AdmissionPolicy):
    """Sliding window: at most `limit` hits per `window` seconds per key.

    Keys whose hits have all aged out are swept at most once per window, so
    the map only holds callers seen within the last window.
    """

    def __init__(self, limit: int, window: int, clock=time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        expired = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]
        for key in expired:
            del self._hits[key]
        self._last_sweep = now
        if expired:
            logger.debug("Dropped %d expired rate-limit keys", len(expired))

    def hit(self, key: str) -> AdmissionDecision:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window:
                hits.popleft()
            if len(hits) >= self.limit:
                retry_after = max(1, math.ceil(self.window - (now - hits[0])))
                return AdmissionDecision(False, self.limit, 0, retry_after)
            hits.append(now)
            return AdmissionDecision(True, self.limit, self.limit - len(hits))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RedisWindowLimiter(AdmissionPolicy):
    """Fixed window counter in Redis: INCR + EXPIRE on first hit.

    Fails open: when Redis is unreachable the submission is admitted and the
    error logged.
    """

    def __init__(self, client, limit: int, window: int, prefix: str = "thm:register:"):
        self._redis = client
        self.limit = limit
        self.window = window
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, limit: int, window: int) -> "RedisWindowLimiter":
        return cls(redis.Redis.from_url(url, socket_timeout=2, socket_connect_timeout=2), limit, window)

    def hit(self, key: str) -> AdmissionDecision:
        name = self.prefix + key
        try:
            pipe = self._redis.pipeline()
            pipe.incr(name)
            pipe.ttl(name)
            count, ttl = pipe.execute()
            if count == 1 or ttl is None or ttl < 0:
                self._redis.expire(name, self.window)
                ttl = self.window
        except redis.RedisError as e:
            logger.error("Rate limit store unavailable, admitting %s: %s", key, e)
            return AdmissionDecision(True, self.limit, self.limit)
        if count > self.limit:
            return AdmissionDecision(False, self.limit, 0, max(1, int(ttl)))
        return AdmissionDecision(True, self.limit, self.limit - int(count))

    def close(self) -> None:
        self._redis.close()


def build_admission_policy() -> AdmissionPolicy | None:
    if not settings.RATE_LIMIT_ENABLED:
        return None
    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisWindowLimiter.from_url(settings.REDIS_URL, settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)
    return MemoryWindowLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)
