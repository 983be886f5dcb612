"""
Retry with exponential backoff for remote calls.

The executor knows nothing about what it is wrapping.  It takes a zero
argument coroutine function, awaits it, and on failure decides whether
the failure is worth another attempt:

    quota   - 429, a rateLimitExceeded style reason, or a message saying
              'quota exceeded' / 'too many requests'
    server  - 500, 502, 503, 504
    fatal   - anything else, re-raised straight away

Delay before retry n (0-based) is min(2^n * 1000 + U(0, 1000), max_backoff)
milliseconds.
"""
import asyncio
import logging
import random
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, TypeVar

from .errors import reasons_of, status_of

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUOTA = "quota"
SERVER = "server"
FATAL = "fatal"

RETRYABLE_SERVER_STATUS = frozenset([500, 502, 503, 504])
QUOTA_STATUS = 429
QUOTA_REASONS = frozenset(["rateLimitExceeded", "userRateLimitExceeded"])
QUOTA_MESSAGES = ("quota exceeded", "too many requests")

DEFAULT_MAX_RETRIES = 5
DEFAULT_MAX_BACKOFF_MS = 64000
BASE_DELAY_MS = 1000
MAX_JITTER_MS = 1000

@dataclass(frozen=True)
class RetryPolicy():
    """
    How hard to try.  max_retries is the number of retries after the first
    attempt, so 0 means a single attempt.
    """
    max_retries: int = field(default=DEFAULT_MAX_RETRIES)
    max_backoff_ms: int = field(default=DEFAULT_MAX_BACKOFF_MS)

    def __post_init__(self) -> None:
        if not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ValueError(f"max_retries must be an int >= 0, not: {self.max_retries}")
        if not isinstance(self.max_backoff_ms, int) or self.max_backoff_ms <= 0:
            raise ValueError(f"max_backoff_ms must be an int > 0, not: {self.max_backoff_ms}")

    def override(self, max_retries: int|None = None, max_backoff_ms: int|None = None) -> "RetryPolicy":
        """New policy with any non-None values replaced."""
        changes = {}
        if max_retries is not None:
            changes["max_retries"] = max_retries
        if max_backoff_ms is not None:
            changes["max_backoff_ms"] = max_backoff_ms
        return replace(self, **changes) if changes else self

def classify(error: BaseException) -> str:
    """Sort a failure into QUOTA, SERVER or FATAL."""
    status = status_of(error)
    if status == QUOTA_STATUS:
        return QUOTA
    if QUOTA_REASONS.intersection(reasons_of(error)):
        return QUOTA
    message = str(error).lower()
    if any(m in message for m in QUOTA_MESSAGES):
        return QUOTA
    if status in RETRYABLE_SERVER_STATUS:
        return SERVER
    return FATAL

def compute_delay(attempt: int, policy: RetryPolicy,
                  jitter: Callable[[float, float], float] = random.uniform) -> float:
    """Backoff in milliseconds before the retry following attempt (0-based)."""
    delay = (2 ** attempt) * BASE_DELAY_MS + jitter(0, MAX_JITTER_MS)
    return min(delay, policy.max_backoff_ms)

async def execute(operation: Callable[[], Awaitable[T]],
                  policy: RetryPolicy|None = None,
                  description: str = "API call",
                  sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                  jitter: Callable[[float, float], float] = random.uniform) -> T:
    """
    Await operation() until it succeeds, fails fatally, or the retries run out.
    The last error is re-raised with retry_attempts and retry_classification
    attached so the caller can see how hard we tried.
    sleep and jitter are injectable so tests don't have to wait.
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            classification = classify(e)
            context = {
                "operation": description,
                "attempt": attempt,
                "max_retries": policy.max_retries,
                "classification": classification,
                "status": status_of(e),
            }
            if classification == FATAL or attempt >= policy.max_retries:
                logger.error("%s failed after %d retries: %s", description, attempt, e,
                             extra={**context, "error": str(e)})
                e.retry_attempts = attempt
                e.retry_classification = classification
                e.add_note(f"simplesheets: {description} gave up after {attempt} "
                           f"of {policy.max_retries} retries ({classification})")
                raise
            delay_ms = compute_delay(attempt, policy, jitter)
            logger.warning("%s failed, retrying in %dms", description, round(delay_ms),
                           extra={**context, "delay_ms": round(delay_ms)})
            await sleep(delay_ms / 1000)
            attempt += 1
