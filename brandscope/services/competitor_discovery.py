"""Competitor discovery: model answer parsing and name normalization.

The model is asked for JSON but answers are parsed by an ordered list of
strategies. Each strategy returns a ``CompetitorSet`` or ``None``; the first
set that names at least one competitor wins.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterable
from typing import Any

from brandscope.agents.competitor_discovery import (
    CompetitorDiscoveryAgent,
    CompetitorDiscoveryInput,
)
from brandscope.config import settings
from brandscope.schemas.analysis import CompetitorSet
from brandscope.schemas.search import RedditThread

logger = logging.getLogger(__name__)

NO_THREADS_CONTEXT = "No Reddit data available for analysis"
UNPARSEABLE_ERROR = "Failed to parse competitor discovery response"

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 50

_SUFFIX_RE = re.compile(r"[\s,]+(?:inc|llc|ltd|corp|co|gmbh)\.?$", re.IGNORECASE)
_EDGE_CHARS = " \t\n\"'`*_.,;:!?()[]{}<>"
_NAME = r"[A-Z][\w&'+-]*(?:\.[a-z]{2,4})?(?:\s+[A-Z][\w&'+-]*){0,3}"
_PHRASE_PATTERNS = [
    re.compile(rf"(?i:\balternatives?\s+to)\s+({_NAME})"),
    re.compile(rf"(?i:\b(?:vs\.?|versus))\s+({_NAME})"),
    re.compile(rf"({_NAME})\s+(?i:(?:vs\.?|versus))(?=\s)"),
    re.compile(rf"(?i:\bcompared\s+(?:to|with))\s+({_NAME})"),
    re.compile(rf"(?i:\binstead\s+of)\s+({_NAME})"),
    re.compile(rf"(?i:\bswitched\s+(?:to|from))\s+({_NAME})"),
]
# A list ends at a newline or a sentence-ending dot; dots inside names such as "Monday.com" are kept
_LIST_PATTERN = re.compile(r"(?i:\bcompetitors?)\s*:\s*((?:[^\n.]|\.(?=\S))+)")
_QUOTED_PATTERN = re.compile(rf"[\"“]({_NAME})[\"”]")
_LIST_SPLIT_RE = re.compile(r"\s*(?:,|;|/|\band\b|\bor\b)\s*")
_STOPWORDS = {"the", "this", "that", "they", "these", "those", "reddit", "name", "none"}


def normalize_competitor_name(raw: str, brand_name: str) -> str | None:
    """Clean one candidate name, or return None when it must be dropped."""
    name = " ".join(str(raw).split()).strip(_EDGE_CHARS)
    previous = None
    while previous != name:
        previous = name
        name = _SUFFIX_RE.sub("", name).strip(_EDGE_CHARS)

    if name and name == name.lower():
        name = " ".join(word[:1].upper() + word[1:] for word in name.split())

    if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
        return None
    if name.lower() in _STOPWORDS:
        return None
    if name.lower() == brand_name.strip().lower():
        return None
    return name


def build_competitor_set(
    candidates: Iterable[str],
    brand_name: str,
    max_competitors: int,
    *,
    mentions: dict[str, Any] | None = None,
    contexts: dict[str, Any] | None = None,
    analysis_context: str = "",
    strategy: str | None = None,
) -> CompetitorSet:
    """Normalize, dedupe, rank by mention count and cap candidate names.

    Ties in mention count keep discovery order. Names without a reported
    count are counted once.
    """
    mentions = mentions or {}
    contexts = contexts or {}

    order: list[str] = []
    canonical: dict[str, str] = {}
    counts: dict[str, int] = {}
    quotes: dict[str, list[str]] = {}
    for raw in candidates:
        name = normalize_competitor_name(raw, brand_name)
        if name is None:
            continue
        key = name.lower()
        raw_count = mentions.get(raw, mentions.get(name))
        try:
            count = max(int(raw_count), 1) if raw_count is not None else 1
        except (TypeError, ValueError):
            count = 1
        raw_contexts = contexts.get(raw, contexts.get(name)) or []
        if isinstance(raw_contexts, str):
            raw_contexts = [raw_contexts]

        if key not in canonical:
            canonical[key] = name
            order.append(key)
            counts[key] = count
            quotes[key] = []
        else:
            counts[key] += count
        quotes[key].extend(str(item) for item in raw_contexts if item)

    ranked = sorted(order, key=lambda key: (-counts[key], order.index(key)))
    kept = ranked[: max(0, max_competitors)]
    return CompetitorSet(
        competitors=[canonical[key] for key in kept],
        competitor_mentions={canonical[key]: counts[key] for key in kept},
        competitor_contexts={canonical[key]: quotes[key] for key in kept if quotes[key]},
        analysis_context=analysis_context,
        strategy=strategy,
    )


def _from_payload(payload: Any, brand_name: str, max_competitors: int, strategy: str) -> CompetitorSet | None:
    if not isinstance(payload, dict):
        return None
    competitors = payload.get("competitors")
    if not isinstance(competitors, list):
        return None
    mentions = payload.get("competitorMentions") or payload.get("competitor_mentions") or {}
    contexts = payload.get("competitorContexts") or payload.get("competitor_contexts") or {}
    return build_competitor_set(
        [str(item) for item in competitors if isinstance(item, str | int | float)],
        brand_name,
        max_competitors,
        mentions=mentions if isinstance(mentions, dict) else {},
        contexts=contexts if isinstance(contexts, dict) else {},
        analysis_context=str(payload.get("analysisContext") or payload.get("analysis_context") or ""),
        strategy=strategy,
    )


def parse_direct_json(text: str, brand_name: str, max_competitors: int) -> CompetitorSet | None:
    try:
        payload = json.loads(text.strip())
    except ValueError:
        return None
    return _from_payload(payload, brand_name, max_competitors, "json")


def parse_embedded_json(text: str, brand_name: str, max_competitors: int) -> CompetitorSet | None:
    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except ValueError:
        return None
    return _from_payload(payload, brand_name, max_competitors, "embedded_json")


def _sentence_around(text: str, start: int, end: int) -> str:
    left = max(text.rfind(".", 0, start), text.rfind("\n", 0, start)) + 1
    right_candidates = [i for i in (text.find(".", end), text.find("\n", end)) if i != -1]
    right = min(right_candidates) if right_candidates else len(text)
    return text[left:right].strip()


def extract_competitors_from_text(
    text: str,
    brand_name: str,
    max_competitors: int,
) -> CompetitorSet | None:
    """Mine competitor names from prose.

    Looks for comparison phrases, ``Competitors: A, B`` lists and quoted
    Title-Case names. Candidates keep the order they appear in the text.
    """
    hits: list[tuple[int, str, str]] = []
    for pattern in _PHRASE_PATTERNS:
        for match in pattern.finditer(text):
            hits.append(
                (match.start(1), match.group(1), _sentence_around(text, match.start(), match.end()))
            )
    for match in _LIST_PATTERN.finditer(text):
        offset = match.start(1)
        for item in _LIST_SPLIT_RE.split(match.group(1)):
            if item.strip():
                position = text.find(item.strip(), offset)
                hits.append((position if position != -1 else offset, item, match.group(0).strip()))
    for match in _QUOTED_PATTERN.finditer(text):
        hits.append((match.start(1), match.group(1), ""))

    if not hits:
        return None

    hits.sort(key=lambda hit: hit[0])
    candidates = [name for _, name, _ in hits]
    mentions: dict[str, int] = {}
    contexts: dict[str, list[str]] = {}
    for _, name, sentence in hits:
        mentions[name] = mentions.get(name, 0) + 1
        if sentence:
            contexts.setdefault(name, []).append(sentence)

    unique_candidates = list(dict.fromkeys(candidates))
    return build_competitor_set(
        unique_candidates,
        brand_name,
        max_competitors,
        mentions=mentions,
        contexts=contexts,
        analysis_context="Competitors extracted from free-text analysis",
        strategy="text_mining",
    )


PARSE_STRATEGIES: list[tuple[str, Callable[[str, str, int], CompetitorSet | None]]] = [
    ("json", parse_direct_json),
    ("embedded_json", parse_embedded_json),
    ("text_mining", extract_competitors_from_text),
]


def parse_competitor_answer(text: str, brand_name: str, max_competitors: int) -> CompetitorSet:
    """Apply the parse strategies in order.

    The first set naming a competitor wins. When strategies parse but find
    nobody, the first parsed (empty) set is returned; when none parse, the
    result carries an error.
    """
    first_parsed: CompetitorSet | None = None
    for name, strategy in PARSE_STRATEGIES:
        parsed = strategy(text, brand_name, max_competitors)
        if parsed is None:
            continue
        if parsed.competitors:
            logger.info(
                "Competitor answer parsed",
                extra={"brand": brand_name, "strategy": name, "competitors": parsed.competitors},
            )
            return parsed
        if first_parsed is None:
            first_parsed = parsed

    if first_parsed is not None:
        return first_parsed
    return CompetitorSet(
        analysis_context="Analysis completed but the answer format was invalid",
        error=UNPARSEABLE_ERROR,
    )


async def discover_competitors(
    threads: list[RedditThread],
    brand_name: str,
    brand_context: str | None = None,
    max_competitors: int | None = None,
) -> CompetitorSet:
    """Find competitors discussed alongside a brand. Never raises."""
    max_competitors = settings.max_competitors if max_competitors is None else max_competitors
    if not threads:
        return CompetitorSet(analysis_context=NO_THREADS_CONTEXT)

    try:
        agent = CompetitorDiscoveryAgent()
        answer = await agent.run(
            CompetitorDiscoveryInput(
                brand_name=brand_name,
                brand_context=brand_context,
                threads=threads,
                max_competitors=max_competitors,
            )
        )
        return parse_competitor_answer(answer or "", brand_name, max_competitors)
    except Exception as e:
        logger.warning("Competitor discovery failed", extra={"brand": brand_name, "error": str(e)})
        return CompetitorSet(error=str(e) or "Unknown error in competitor discovery")
