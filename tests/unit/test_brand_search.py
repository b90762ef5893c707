"""Unit tests for brand web search heuristics and fail-soft behavior."""

from __future__ import annotations

from typing import Any

import pytest

from brandscope.core.exceptions import APIKeyMissingError, ExternalAPIError
from brandscope.schemas.common import AdditionalIdentifiers
from brandscope.schemas.search import SearchResult
from brandscope.services import brand_search


class _FakeExa:
    """Stand-in for ExaClient returning canned rows per query."""

    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.queries: list[str] = []

    async def __aenter__(self) -> "_FakeExa":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def search_and_contents(self, query: str, **kwargs: Any) -> list[dict[str, str]]:
        self.queries.append(query)
        response = self._responses.pop(0) if self._responses else []
        if isinstance(response, Exception):
            raise response
        return response


def _row(url: str, title: str = "", text: str = "") -> dict[str, str]:
    return {"url": url, "title": title, "text": text}


def test_official_queries_include_location_and_bare_fallback() -> None:
    queries = brand_search.construct_brand_queries(
        "Acme",
        None,
        "official",
        AdditionalIdentifiers(industry="robotics", location="Berlin"),
    )

    assert queries == [
        '"Acme" robotics official website',
        "Acme robotics company homepage",
        '"Acme" robotics Berlin official site',
        '"Acme"',
    ]


def test_general_queries_use_first_product() -> None:
    queries = brand_search.construct_brand_queries(
        "Acme",
        "hardware",
        "general",
        AdditionalIdentifiers(products=["Anvil", "Rocket"]),
    )

    assert queries == ['"Acme" hardware', "Acme Anvil hardware", '"Acme"']


def test_about_queries_without_context_have_no_double_spaces() -> None:
    queries = brand_search.construct_brand_queries("Acme", search_type="about")

    assert queries == ['"Acme" about company history', "Acme company information", '"Acme"']


def test_preliminary_score_rewards_official_domain() -> None:
    row = _row(
        "https://www.acme-robotics.com/about",
        title="Acme Robotics | Home",
        text="Welcome to the official Acme Robotics homepage for robotics",
    )

    # 40 domain + 20 .com + 15 title + 10 official marker + 10 context
    assert brand_search.calculate_preliminary_score(row, "Acme Robotics", "robotics") == 95


def test_preliminary_score_penalizes_third_party_and_clamps_at_zero() -> None:
    row = _row("https://en.wikipedia.org/wiki/Something", title="Other", text="")

    assert brand_search.calculate_preliminary_score(row, "Acme", None) == 0


def test_preliminary_score_third_party_penalty_applies() -> None:
    row = _row("https://www.linkedin.com/company/acme", title="Acme | LinkedIn", text="")

    # 40 domain + 20 .com + 15 title - 20 third party
    assert brand_search.calculate_preliminary_score(row, "Acme", None) == 55


def test_remove_duplicate_urls_keeps_first_occurrence() -> None:
    results = [
        SearchResult(url="https://a.com", title="first"),
        SearchResult(url="https://b.com"),
        SearchResult(url="https://a.com", title="second"),
    ]

    unique = brand_search.remove_duplicate_urls(results)

    assert [r.url for r in unique] == ["https://a.com", "https://b.com"]
    assert unique[0].title == "first"


@pytest.mark.asyncio
async def test_search_brand_stops_after_query_with_enough_results(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [_row(f"https://site{i}.com", title=f"Site {i}") for i in range(4)]
    fake = _FakeExa([rows, [_row("https://never.com")]])
    monkeypatch.setattr(brand_search, "ExaClient", lambda: fake)

    response = await brand_search.search_brand("Acme")

    assert len(fake.queries) == 1
    assert len(response.results) == 4
    assert response.error is None
    assert response.search_queries[0] == '"Acme" official website'


@pytest.mark.asyncio
async def test_search_brand_skips_failing_query(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeExa(
        [
            ExternalAPIError("Exa", "boom"),
            [_row("https://acme.com", title="Acme")],
            [_row("https://acme.com", title="Acme duplicate"), _row("https://news.com/acme")],
        ]
    )
    monkeypatch.setattr(brand_search, "ExaClient", lambda: fake)

    response = await brand_search.search_brand("Acme")

    assert len(fake.queries) == 3
    assert [r.url for r in response.results] == ["https://acme.com", "https://news.com/acme"]
    assert response.results[0].title == "Acme"


@pytest.mark.asyncio
async def test_search_brand_summarizes_long_content(monkeypatch: pytest.MonkeyPatch) -> None:
    long_text = "Acme official site. " * 20
    fake = _FakeExa([[_row("https://acme.com", title="Acme", text=long_text), _row("https://x.com", text="short")]])
    monkeypatch.setattr(brand_search, "ExaClient", lambda: fake)

    calls: list[str] = []

    async def _fake_summary(**kwargs: Any) -> str:
        calls.append(kwargs["url"])
        return "summary"

    monkeypatch.setattr(brand_search, "summarize_or_truncate", _fake_summary)

    response = await brand_search.search_brand("Acme")

    by_url = {r.url: r for r in response.results}
    assert calls == ["https://acme.com"]
    assert by_url["https://acme.com"].content == "summary"
    assert by_url["https://x.com"].content == "short"
    # Score is computed from the original page text, not the summary
    assert by_url["https://acme.com"].preliminary_score == 85


@pytest.mark.asyncio
async def test_search_brand_returns_sorted_top_eight(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [_row(f"https://site{i}.org", title=f"Site {i}") for i in range(2)]
    rows += [_row(f"https://acme{i}.com", title=f"Acme {i}") for i in range(8)]
    fake = _FakeExa([rows[:4], rows[4:7], rows[7:]])
    monkeypatch.setattr(brand_search, "ExaClient", lambda: fake)
    monkeypatch.setattr(brand_search.settings, "brand_search_early_exit", 99)

    response = await brand_search.search_brand("Acme")

    scores = [r.preliminary_score for r in response.results]
    assert len(response.results) == 8
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_search_brand_reports_no_results(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(brand_search, "ExaClient", lambda: _FakeExa([]))

    response = await brand_search.search_brand("Zzyzx123")

    assert response.results == []
    assert response.error == "No results found"


@pytest.mark.asyncio
async def test_search_brand_reports_missing_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing() -> None:
        raise APIKeyMissingError("Exa")

    monkeypatch.setattr(brand_search, "ExaClient", _missing)

    response = await brand_search.search_brand("Acme")

    assert response.results == []
    assert response.error == "Exa API error: API key not configured"
