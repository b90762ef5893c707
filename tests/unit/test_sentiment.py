"""Unit tests for binary sentiment scoring."""

from __future__ import annotations

import json
from typing import Any

import pytest

from brandscope.core.exceptions import MalformedModelOutputError
from brandscope.schemas.search import RedditThread
from brandscope.services import sentiment
from brandscope.services.sentiment import (
    NO_THREADS_CONTEXT,
    calculate_sentiment_score,
    parse_sentiment_answer,
)


def _detail(label: str, mentions: int = 1, url: str = "https://reddit.com/x") -> dict[str, Any]:
    return {"url": url, "title": "t", "sentiment": label, "confidence": 0.8, "mentionCount": mentions, "excerpt": "e"}


def _agent_returning(answer: Any) -> type:
    class _Agent:
        async def run(self, input_data: Any) -> str:
            if isinstance(answer, Exception):
                raise answer
            return answer

    return _Agent


@pytest.mark.parametrize(
    ("positive", "negative", "expected"),
    [
        (3, 1, 7.5),
        (0, 4, 0.0),
        (5, 0, 10.0),
        (1, 2, 10 / 3),
        (0, 0, 5.0),
    ],
)
def test_calculate_sentiment_score(positive: int, negative: int, expected: float) -> None:
    assert calculate_sentiment_score(positive, negative) == pytest.approx(expected)


def test_parse_counts_only_binary_labels_and_ignores_model_score() -> None:
    answer = json.dumps(
        {
            "sentimentScore": 9.9,
            "sentimentDetails": [
                _detail("POSITIVE"),
                _detail("positive"),
                _detail("NEUTRAL"),
                _detail("NEGATIVE"),
                _detail("MIXED"),
                "not a dict",
            ],
            "analysisContext": "Mostly happy users",
        }
    )

    result = parse_sentiment_answer(answer)

    assert result.sentiment_breakdown.positive == 2
    assert result.sentiment_breakdown.negative == 1
    assert result.sentiment_breakdown.neutral == 0
    assert result.total_mentions == 3
    assert result.sentiment_score == pytest.approx(20 / 3)
    assert [d.sentiment for d in result.sentiment_details] == ["POSITIVE", "POSITIVE", "NEGATIVE"]
    assert result.sentiment_details[0].mention_count == 1
    assert result.analysis_context == "Mostly happy users"


def test_parse_weights_each_detail_by_mention_count() -> None:
    answer = json.dumps(
        {"sentimentDetails": [_detail("POSITIVE", mentions=3), _detail("NEGATIVE", mentions=1), _detail("NEGATIVE", mentions=0)]}
    )

    result = parse_sentiment_answer(answer)

    assert result.sentiment_breakdown.positive == 3
    assert result.sentiment_breakdown.negative == 2
    assert result.total_mentions == 5
    assert result.sentiment_score == pytest.approx(6.0)


def test_parse_recovers_json_embedded_in_prose() -> None:
    answer = 'Sure!\n{"sentimentDetails": [{"sentiment": "NEGATIVE"}]}\nDone.'

    result = parse_sentiment_answer(answer)

    assert result.sentiment_score == 0.0
    assert result.total_mentions == 1


def test_parse_without_binary_mentions_is_neutral() -> None:
    result = parse_sentiment_answer('{"sentimentDetails": [{"sentiment": "NEUTRAL"}]}')

    assert result.sentiment_score == 5.0
    assert result.total_mentions == 0


def test_parse_rejects_answer_without_json() -> None:
    with pytest.raises(MalformedModelOutputError):
        parse_sentiment_answer("I think people like it.")


def test_sentiment_score_is_clamped_on_construction() -> None:
    assert sentiment.SentimentResult(sentiment_score=14).sentiment_score == 10.0
    assert sentiment.SentimentResult(sentiment_score="bad").sentiment_score == 5.0


@pytest.mark.asyncio
async def test_analyze_sentiment_without_threads_is_neutral(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sentiment, "SentimentAnalysisAgent", _agent_returning(AssertionError("no call")))

    result = await sentiment.analyze_sentiment([], "Acme")

    assert result.sentiment_score == 5.0
    assert result.total_mentions == 0
    assert result.analysis_context == NO_THREADS_CONTEXT
    assert result.error is None


@pytest.mark.asyncio
async def test_analyze_sentiment_scores_model_answer(monkeypatch: pytest.MonkeyPatch) -> None:
    answer = json.dumps({"sentimentDetails": [_detail("POSITIVE"), _detail("POSITIVE"), _detail("POSITIVE"), _detail("NEGATIVE")]})
    monkeypatch.setattr(sentiment, "SentimentAnalysisAgent", _agent_returning(answer))

    result = await sentiment.analyze_sentiment(
        [RedditThread(url="https://reddit.com/1", content="Acme rocks")], "Acme"
    )

    assert result.sentiment_score == pytest.approx(7.5)
    assert result.error is None


@pytest.mark.asyncio
async def test_analyze_sentiment_failure_returns_neutral_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sentiment, "SentimentAnalysisAgent", _agent_returning("no json at all"))

    result = await sentiment.analyze_sentiment(
        [RedditThread(url="https://reddit.com/1", content="Acme rocks")], "Acme"
    )

    assert result.sentiment_score == 5.0
    assert result.total_mentions == 0
    assert result.error == "Sentiment answer contains no JSON object"
