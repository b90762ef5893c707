"""Reddit relevance agent for thread-level gating."""

import logging

from pydantic import BaseModel, Field

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.relevance import RedditRelevanceVerdict
from brandscope.schemas.search import RedditThread

logger = logging.getLogger(__name__)


class RedditRelevanceInput(BaseModel):
    """Input for the Reddit relevance agent."""

    brand_name: str
    brand_context: str | None = None
    brand_categories: list[str] = Field(default_factory=list)
    thread: RedditThread


class RedditRelevanceAgent(BaseAgent[RedditRelevanceInput, RedditRelevanceVerdict]):
    """Agent that judges whether a Reddit thread is worth analysing for a brand.

    Threads that pass feed competitor discovery and sentiment analysis, so the
    agent also reports how much sentiment and competitor signal they carry.
    """

    model_tier = "fast"
    temperature = 0.1

    @property
    def system_prompt(self) -> str:
        return """You evaluate Reddit threads for brand research.

Decide whether the thread meaningfully discusses the target brand, and classify the
kind of relevance:
- direct_mention: the brand is the topic of the thread
- comparison: the brand is compared with other brands
- user_experience: first-hand reviews or experiences
- support_discussion: help requests or troubleshooting about the brand
- industry_discussion: the brand's market is discussed and the brand appears
- competitor_mention: the brand appears only alongside competitors
- irrelevant: a different entity with the same name, or no real discussion

confidenceScore is 0-100. Report whether the thread carries clear sentiment about the
brand and how valuable it is for finding competitors (both 0-100). Keep reasoning short."""

    @property
    def output_type(self) -> type[RedditRelevanceVerdict]:
        return RedditRelevanceVerdict

    def _build_prompt(self, input_data: RedditRelevanceInput) -> str:
        context_lines: list[str] = []
        if input_data.brand_context:
            context_lines.append(f"Brand context: {input_data.brand_context}")
        if input_data.brand_categories:
            context_lines.append(f"Brand categories: {', '.join(input_data.brand_categories)}")

        thread = input_data.thread
        return f"""Evaluate whether this Reddit thread is relevant to the brand "{input_data.brand_name}" \
and valuable for competitor discovery and sentiment analysis.\
{self._format_context_lines(context_lines, "Additional Context")}

Reddit thread to evaluate:
Title: {thread.title}
Subreddit: {thread.subreddit}
Score: {thread.score}
Comments: {thread.comments}
URL: {thread.url}
Content: {thread.content[:1500]}"""
