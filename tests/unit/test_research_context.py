"""Unit tests for per-run URL claims."""

import asyncio

import pytest

from brandscope.services.research_context import ResearchContext


@pytest.mark.asyncio
async def test_concurrent_claims_grant_a_url_once() -> None:
    ctx = ResearchContext()

    claims = await asyncio.gather(*[ctx.claim_url("Acme", "https://acme.com") for _ in range(10)])

    assert claims.count(True) == 1
    assert ctx.processed_count == 1


@pytest.mark.asyncio
async def test_claims_are_namespaced_case_insensitively() -> None:
    ctx = ResearchContext()

    assert await ctx.claim_url("Acme", "https://x.com") is True
    assert await ctx.claim_url("ACME ", "https://x.com") is False
    assert await ctx.claim_url("Globex", "https://x.com") is True
    assert ctx.is_processed("acme", "https://x.com")
    assert not ctx.is_processed("Hooli", "https://x.com")
