from __future__ import annotations

import httpx
import pytest

from today_sports.ingestion.providers.base.client import BaseHttpClient
from today_sports.ingestion.providers.base.errors import (
    ProviderRateLimited,
    ProviderRequestError,
)


def _client(handler, sleeps: list[float], retries: int = 1) -> BaseHttpClient:
    return BaseHttpClient(
        base_url="https://provider.test/v1",
        retries=retries,
        retry_backoff_s=0.2,
        transport=httpx.MockTransport(handler),
        _sleep=sleeps.append,
    )


def test_client_retries_once_then_succeeds() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json={"ok": True})

    sleeps: list[float] = []
    http = _client(handler, sleeps)

    assert http.get_json("/schedule/2024-01-15") == {"ok": True}
    assert calls == ["/v1/schedule/2024-01-15", "/v1/schedule/2024-01-15"]
    assert sleeps == [0.2]


def test_client_gives_up_after_bounded_retries() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectTimeout("timed out", request=request)

    sleeps: list[float] = []
    http = _client(handler, sleeps)

    with pytest.raises(ProviderRequestError):
        http.get_json("/schedule")
    assert calls == 2
    assert sleeps == [0.2]


def test_client_maps_429_and_non_object_json() -> None:
    sleeps: list[float] = []

    limited = _client(lambda request: httpx.Response(429), sleeps, retries=0)
    with pytest.raises(ProviderRateLimited):
        limited.get_json("/schedule")

    listy = _client(lambda request: httpx.Response(200, json=[1, 2]), sleeps, retries=0)
    with pytest.raises(ProviderRequestError):
        listy.get_json("/schedule")

    broken = _client(lambda request: httpx.Response(200, text="<html>"), sleeps, retries=0)
    with pytest.raises(ProviderRequestError):
        broken.get_json("/schedule")

    assert sleeps == []


@pytest.mark.parametrize("error", [httpx.DecodingError, httpx.TooManyRedirects])
def test_client_maps_every_request_error(error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error("upstream misbehaved", request=request)

    sleeps: list[float] = []
    http = _client(handler, sleeps)

    with pytest.raises(ProviderRequestError):
        http.get_json("/schedule")
    assert sleeps == [0.2]
