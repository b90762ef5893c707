"""Unit tests for the Exa search client."""

from __future__ import annotations

import json

import httpx
import pytest

from brandscope.core.exceptions import APIKeyMissingError, ExternalAPIError, RateLimitExceededError
from brandscope.integrations.exa import ExaClient


def test_missing_api_key_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("brandscope.integrations.exa.settings.exa_api_key", None)

    with pytest.raises(APIKeyMissingError):
        ExaClient()


@pytest.mark.asyncio
async def test_search_and_contents_sends_payload_and_normalizes_rows() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "results": [
                    {"url": "https://acme.com", "title": "Acme", "text": "Welcome"},
                    {"url": "", "title": "no url"},
                    {"url": "https://acme.com/about", "title": None},
                    "garbage",
                ]
            },
        )

    async with ExaClient(api_key="test-key", base_url="https://exa.test") as exa:
        await exa.client.aclose()
        exa._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        rows = await exa.search_and_contents(
            '"Acme" official website',
            num_results=3,
            include_domains=["linkedin.com"],
            livecrawl="always",
        )

    assert rows == [
        {"title": "Acme", "url": "https://acme.com", "text": "Welcome"},
        {"title": "", "url": "https://acme.com/about", "text": ""},
    ]
    sent = json.loads(requests[0].content)
    assert str(requests[0].url) == "https://exa.test/search"
    assert sent == {
        "query": '"Acme" official website',
        "numResults": 3,
        "contents": {"text": True, "livecrawl": "always"},
        "includeDomains": ["linkedin.com"],
    }


@pytest.mark.asyncio
async def test_error_statuses_map_to_typed_errors() -> None:
    responses = iter([httpx.Response(429), httpx.Response(500), httpx.Response(200, content=b"not json")])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with ExaClient(api_key="test-key", base_url="https://exa.test") as exa:
        await exa.client.aclose()
        exa._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with pytest.raises(RateLimitExceededError):
            await exa.search_and_contents("q")
        with pytest.raises(ExternalAPIError, match="500"):
            await exa.search_and_contents("q")
        with pytest.raises(ExternalAPIError, match="Invalid JSON"):
            await exa.search_and_contents("q")
