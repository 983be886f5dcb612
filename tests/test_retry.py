import logging
import random

import pytest
from googleapiclient.errors import HttpError

from simplesheets.retry import *
from fakes import http_error

class Flaky():
    """Fails with the given errors in order, then returns 'ok'"""
    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"

class Sleeps():
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)

def no_jitter(a, b):
    return 0

def full_jitter(a, b):
    return b

def test_policy_validation():
    assert(RetryPolicy() == RetryPolicy(5, 64000))
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=-1)
    with pytest.raises(ValueError):
        RetryPolicy(max_backoff_ms=0)
    p = RetryPolicy().override(max_retries=1)
    assert(p.max_retries == 1 and p.max_backoff_ms == DEFAULT_MAX_BACKOFF_MS)
    assert(RetryPolicy().override() == RetryPolicy())

def test_classify():
    assert(classify(http_error(429, "slow down")) == QUOTA)
    assert(classify(http_error(403, "Rate Limit Exceeded", reason="rateLimitExceeded")) == QUOTA)
    assert(classify(http_error(403, "Quota exceeded for quota metric 'Read requests'")) == QUOTA)
    assert(classify(RuntimeError("Too many requests")) == QUOTA)
    for status in (500, 502, 503, 504):
        assert(classify(http_error(status, "backend error")) == SERVER)
    assert(classify(http_error(400, "Invalid requests[0]")) == FATAL)
    assert(classify(http_error(404, "Requested entity was not found.")) == FATAL)
    assert(classify(http_error(501, "not implemented")) == FATAL)
    assert(classify(ValueError("nope")) == FATAL)

def test_compute_delay():
    policy = RetryPolicy(max_retries=10, max_backoff_ms=10000)
    assert(compute_delay(0, policy, no_jitter) == 1000)
    assert(compute_delay(3, policy, no_jitter) == 8000)
    assert(compute_delay(3, policy, full_jitter) == 9000)
    assert(compute_delay(4, policy, no_jitter) == 10000)
    assert(compute_delay(9, policy, full_jitter) == 10000)

async def test_success_first_time():
    op = Flaky()
    sleeps = Sleeps()
    assert(await execute(op, RetryPolicy(), sleep=sleeps) == "ok")
    assert(op.calls == 1)
    assert(sleeps.delays == [])

async def test_retries_quota_then_succeeds():
    op = Flaky(http_error(429, "slow down"), http_error(503, "unavailable"))
    sleeps = Sleeps()
    result = await execute(op, RetryPolicy(max_retries=5), sleep=sleeps, jitter=no_jitter)
    assert(result == "ok")
    assert(op.calls == 3)
    assert(sleeps.delays == [1.0, 2.0])

async def test_gives_up_after_max_retries(caplog):
    caplog.set_level(logging.DEBUG, logger="simplesheets")
    errors = [http_error(429, "slow down") for _ in range(10)]
    op = Flaky(*errors)
    sleeps = Sleeps()
    policy = RetryPolicy(max_retries=4, max_backoff_ms=3000)
    with pytest.raises(HttpError) as excinfo:
        await execute(op, policy, "values.get", sleep=sleeps, jitter=random.uniform)
    assert(op.calls == 5)
    assert(len(sleeps.delays) == 4)
    # capped and never decreasing
    assert(all(d * 1000 <= policy.max_backoff_ms for d in sleeps.delays))
    assert(sleeps.delays == sorted(sleeps.delays))
    assert(excinfo.value.retry_attempts == 4)
    assert(excinfo.value.retry_classification == QUOTA)
    assert(any("gave up after 4" in n for n in excinfo.value.__notes__))

    retries = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert([r.attempt for r in retries] == [0, 1, 2, 3])
    assert(all(r.classification == QUOTA and r.operation == "values.get" for r in retries))
    assert(all(r.delay_ms <= 3000 for r in retries))
    terminal = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert(len(terminal) == 1)
    assert(terminal[0].attempt == 4 and terminal[0].status == 429)

async def test_fatal_is_not_retried():
    op = Flaky(http_error(400, "Invalid value at 'data.values'"))
    sleeps = Sleeps()
    with pytest.raises(HttpError) as excinfo:
        await execute(op, RetryPolicy(), sleep=sleeps)
    assert(op.calls == 1)
    assert(sleeps.delays == [])
    assert(excinfo.value.retry_attempts == 0)
    assert(excinfo.value.retry_classification == FATAL)

async def test_zero_retries_means_one_attempt():
    op = Flaky(http_error(500, "backend error"))
    sleeps = Sleeps()
    with pytest.raises(HttpError):
        await execute(op, RetryPolicy(max_retries=0), sleep=sleeps)
    assert(op.calls == 1)
    assert(sleeps.delays == [])
