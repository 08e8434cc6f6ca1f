from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from .errors import is_rate_limited

logger = logging.getLogger("wallet_role_bot.sheets")

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay_ms: int = 1000
    max_delay_ms: int = 15000
    jitter_ms: int = 250

    def delay_ms(self, retry_index: int, jitter: int = 0) -> int:
        """Backoff before retry number ``retry_index`` (0-based), jitter excluded from the cap."""
        base = self.base_delay_ms * (2 ** max(0, retry_index))
        return min(base, self.max_delay_ms) + max(0, int(jitter))


async def call_with_retry(
    request_fn: Callable[[], Awaitable[T]],
    description: str = "Sheets API call",
    *,
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    rng: random.Random | None = None,
) -> T:
    policy = policy or RetryPolicy()
    rng = rng or random
    attempts = max(1, policy.max_attempts)

    attempt = 0
    while True:
        try:
            return await request_fn()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            attempt += 1
            if not is_rate_limited(exc) or attempt >= attempts:
                raise
            jitter = rng.randint(0, policy.jitter_ms) if policy.jitter_ms > 0 else 0
            delay_ms = policy.delay_ms(attempt - 1, jitter)
            logger.warning(
                "%s rate limited (attempt %s/%s); retrying in %sms",
                description,
                attempt,
                attempts,
                delay_ms,
            )
            await sleep(delay_ms / 1000.0)
