from __future__ import annotations

import pytest

from gallery.services.exceptions import NetworkError
from gallery.utils.retry import retry_async


class _Flaky:
    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.asyncio
async def test_retry_async_backs_off_linearly(monkeypatch):
    delays: list[float] = []

    async def _record_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("gallery.utils.retry.asyncio.sleep", _record_sleep)
    operation = _Flaky(2, NetworkError("down"))

    result = await retry_async(operation, max_attempts=3, base_delay=0.5)

    assert result == "ok"
    assert operation.calls == 3
    assert delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_retry_async_reraises_last_error():
    operation = _Flaky(5, NetworkError("down"))

    with pytest.raises(NetworkError):
        await retry_async(operation, max_attempts=2, base_delay=0)

    assert operation.calls == 2


@pytest.mark.asyncio
async def test_retry_async_skips_unlisted_errors():
    operation = _Flaky(1, ValueError("bad data"))

    with pytest.raises(ValueError):
        await retry_async(operation, max_attempts=3, base_delay=0, retry_on=(NetworkError,))

    assert operation.calls == 1
