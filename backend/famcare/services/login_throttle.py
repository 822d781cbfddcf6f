"""Failed-login throttling.

The in-memory counter is best-effort and process-local: it is lost on
restart and is not shared between server instances. Deployments running
more than one process need an ``AttemptCounter`` backed by a shared cache.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from famcare.core.config import get_settings
from famcare.services.errors import RateLimitedError


class AttemptCounter(Protocol):
    """Counter of login attempts per key; entries expire ``ttl`` seconds after the first hit."""

    async def try_acquire(self, key: str, limit: int, ttl: float) -> tuple[bool, int, float]: ...
    async def reset(self, key: str) -> None: ...


@dataclass
class _Entry:
    count: int
    expires_at: float


class InMemoryAttemptCounter:
    """Dict-backed ``AttemptCounter``.

    ``try_acquire`` returns ``(acquired, count, seconds_until_expiry)``. The
    count is only incremented when it is still below ``limit``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    def _live_entry(self, key: str, now: float) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at <= now:
            del self._entries[key]
            return None
        return entry

    async def try_acquire(self, key: str, limit: int, ttl: float) -> tuple[bool, int, float]:
        async with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                entry = _Entry(count=0, expires_at=now + ttl)
                self._entries[key] = entry
            elif entry.count >= limit:
                return False, entry.count, entry.expires_at - now
            entry.count += 1
            return True, entry.count, entry.expires_at - now

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)


class LoginThrottle:
    def __init__(
        self,
        counter: AttemptCounter,
        *,
        max_attempts: int,
        window_seconds: int,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.counter = counter
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(email: str) -> str:
        return email.strip().lower()

    async def acquire(self, key: str) -> int:
        """Reserve one attempt before the password is checked.

        Returns how many attempts are left if this one fails. Raises
        ``RateLimitedError`` once the key has used up its attempts, so
        concurrent requests cannot overshoot the cap.
        """
        acquired, count, remaining_seconds = await self.counter.try_acquire(
            key, self.max_attempts, self.window_seconds
        )
        if not acquired:
            raise RateLimitedError(retry_after=int(remaining_seconds) + 1)
        return self.max_attempts - count

    async def reset(self, key: str) -> None:
        await self.counter.reset(key)


@lru_cache
def get_login_throttle() -> LoginThrottle:
    settings = get_settings()
    return LoginThrottle(
        InMemoryAttemptCounter(),
        max_attempts=settings.login_max_attempts,
        window_seconds=settings.login_window_seconds,
    )
