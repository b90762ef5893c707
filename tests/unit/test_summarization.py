"""Unit tests for summarize-or-truncate."""

from typing import Any

import pytest

from brandscope.services import summarization


def _agent(result: Any) -> type:
    class _Agent:
        async def run(self, input_data: Any) -> str:
            if isinstance(result, Exception):
                raise result
            return result

    return _Agent


def test_truncate_only_marks_cut_text() -> None:
    assert summarization.truncate("short", 10) == "short"
    assert summarization.truncate("abcdefghij", 4) == "abcd..."


@pytest.mark.asyncio
async def test_summary_is_returned_stripped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(summarization, "WebSummarizationAgent", _agent("  Acme sells anvils.  "))

    summary = await summarization.summarize_or_truncate(
        subject="Acme", content="x" * 2000, focus="products"
    )

    assert summary == "Acme sells anvils."


@pytest.mark.asyncio
async def test_failure_falls_back_to_truncation(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(summarization, "WebSummarizationAgent", _agent(RuntimeError("rate limited")))

    summary = await summarization.summarize_or_truncate(
        subject="Acme", content="y" * 2000, focus="products"
    )

    assert summary == "y" * 500 + "..."


@pytest.mark.asyncio
async def test_empty_summary_falls_back_to_truncation(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(summarization, "WebSummarizationAgent", _agent("   "))

    summary = await summarization.summarize_or_truncate(
        subject="Acme", content="z" * 50, focus="products", fallback_chars=10
    )

    assert summary == "z" * 10 + "..."
