from __future__ import annotations

from collections import defaultdict, deque
from threading import Lock
import time
from typing import Callable, Deque

from fastapi import HTTPException, Request, status

SWEEP_INTERVAL_SECONDS = 60.0


class SlidingWindowRateLimiter:
    """Counts hits per key inside a trailing time window.

    Keys whose newest hit has left its window are swept at most once per
    ``SWEEP_INTERVAL_SECONDS`` so one-off clients do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._hits: dict[str, Deque[float]] = defaultdict(deque)
        self._expires_at: dict[str, float] = {}
        self._clock = clock
        self._next_sweep = 0.0
        self._lock = Lock()

    def _sweep(self, now: float) -> None:
        stale = [key for key, expires_at in self._expires_at.items() if expires_at <= now]
        for key in stale:
            self._expires_at.pop(key, None)
            self._hits.pop(key, None)
        self._next_sweep = now + SWEEP_INTERVAL_SECONDS

    def hit(self, key: str, *, limit: int, window_seconds: int) -> int | None:
        """Record a hit; return ``None`` when allowed, else seconds until the oldest hit expires."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            window = self._hits[key]
            while window and window[0] <= now - window_seconds:
                window.popleft()
            if len(window) >= limit:
                return max(1, int(window[0] + window_seconds - now))
            window.append(now)
            self._expires_at[key] = now + window_seconds
        return None

    def tracked_keys(self) -> set[str]:
        with self._lock:
            return set(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._expires_at.clear()
            self._next_sweep = 0.0


_limiter = SlidingWindowRateLimiter()


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    *,
    request: Request,
    scope: str,
    limit: int,
    window_seconds: int,
    identity: str | None = None,
) -> None:
    key = f"{scope}|{_client_address(request)}|{(identity or '').strip().lower()}"
    retry_after = _limiter.hit(key, limit=limit, window_seconds=window_seconds)
    if retry_after is None:
        return
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many attempts. Try again in {retry_after} second(s).",
        headers={"Retry-After": str(retry_after)},
    )


def clear_rate_limiter() -> None:
    _limiter.reset()
