from __future__ import annotations

import asyncio

import httpx

from binsight.adapters.http_resilience import ResilientClient, build_retry
from binsight.config import RateLimit, ResilienceConfig, RetryPolicy

_NO_BACKOFF = RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0)


def test_build_retry_copies_policy() -> None:
    retry = build_retry(RetryPolicy(total=7))

    assert retry.total == 7


def test_client_applies_base_url_and_default_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="test",
        base_url="https://intel.test",
        retry=_NO_BACKOFF,
        default_headers={"Authorization": "Bearer token"},
    )

    async def run() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.get("/api/ping", params={"q": "1"})

    response = asyncio.run(run())

    assert response.json() == {"ok": True}
    assert str(seen[0].url) == "https://intel.test/api/ping?q=1"
    assert seen[0].headers["Authorization"] == "Bearer token"


def test_client_retries_unavailable_responses() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(503, request=request)
        return httpx.Response(200, json={"attempt": calls}, request=request)

    config = ResilienceConfig(
        name="test",
        base_url="https://intel.test",
        retry=_NO_BACKOFF,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )

    async def run() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.get("/api/ping")

    response = asyncio.run(run())

    assert response.status_code == 200
    assert calls == 2
