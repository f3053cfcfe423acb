# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Token bucket rate limiting, single-bucket and keyed per client."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable

from stockfly.kernel.exceptions import RateLimitException

Clock = Callable[[], float]


class RateLimiter:
    """Token bucket rate limiter.

    Tokens are added at a fixed rate up to a maximum capacity. Each call
    consumes one token. When no tokens are available, RateLimitException is
    raised with the seconds until the next token in ``context["retry_after"]``.

    Args:
        max_tokens: Maximum bucket capacity (burst size).
        refill_rate: Tokens added per second.
        clock: Monotonic time source.
    """

    def __init__(self, max_tokens: int = 10, refill_rate: float = 10.0, clock: Clock = time.monotonic) -> None:
        if max_tokens < 1 or refill_rate <= 0:
            raise ValueError("max_tokens must be >= 1 and refill_rate > 0")
        self._max_tokens = max_tokens
        self._refill_rate = refill_rate
        self._clock = clock
        self._tokens = float(max_tokens)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire a token. Raises RateLimitException if none available."""
        async with self._lock:
            self._refill()
            if self._tokens < 1.0:
                retry_after = (1.0 - self._tokens) / self._refill_rate
                raise RateLimitException(
                    "Rate limit exceeded",
                    code="RATE_LIMITED",
                    context={"retry_after": round(retry_after, 3)},
                )
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        self._tokens = min(self._max_tokens, self._tokens + elapsed * self._refill_rate)
        self._last_refill = now

    @property
    def available_tokens(self) -> float:
        """Current number of available tokens (approximate)."""
        self._refill()
        return self._tokens

    @property
    def is_full(self) -> bool:
        return self.available_tokens >= self._max_tokens


class KeyedRateLimiter:
    """One :class:`RateLimiter` per key (typically the client address).

    At most ``max_keys`` buckets are kept; when a new key arrives at
    capacity, full buckets are dropped first, then the least recently used.
    """

    def __init__(
        self,
        max_tokens: int = 100,
        refill_rate: float = 50.0,
        max_keys: int = 10_000,
        clock: Clock = time.monotonic,
    ) -> None:
        self._max_tokens = max_tokens
        self._refill_rate = refill_rate
        self._max_keys = max_keys
        self._clock = clock
        self._buckets: OrderedDict[str, RateLimiter] = OrderedDict()

    async def acquire(self, key: str) -> None:
        await self._bucket(key).acquire()

    def __len__(self) -> int:
        return len(self._buckets)

    def _bucket(self, key: str) -> RateLimiter:
        bucket = self._buckets.get(key)
        if bucket is not None:
            self._buckets.move_to_end(key)
            return bucket
        if len(self._buckets) >= self._max_keys:
            self._prune()
        bucket = RateLimiter(self._max_tokens, self._refill_rate, clock=self._clock)
        self._buckets[key] = bucket
        return bucket

    def _prune(self) -> None:
        for key in [k for k, b in self._buckets.items() if b.is_full]:
            del self._buckets[key]
        while len(self._buckets) >= self._max_keys:
            self._buckets.popitem(last=False)
