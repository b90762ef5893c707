"""Web summarization agent used to condense long pages before analysis."""

import logging

from pydantic import BaseModel

from brandscope.agents.base_agent import BaseAgent

logger = logging.getLogger(__name__)


class WebSummaryInput(BaseModel):
    """Input for the web summarization agent."""

    subject: str
    title: str = ""
    url: str = ""
    content: str
    focus: str
    max_chars: int = 8000


class WebSummarizationAgent(BaseAgent[WebSummaryInput, str]):
    """Agent that condenses page or thread text around a research focus.

    Summaries replace raw page text in search results so later prompts stay
    short. Callers truncate the original text when this agent fails.
    """

    model_tier = "fast"
    temperature = 0.2

    @property
    def system_prompt(self) -> str:
        return """You summarize web pages and forum threads for a brand research team.
Keep concrete facts: names, numbers, dates, locations, product names, opinions
and comparisons. Drop navigation text, cookie banners and boilerplate.
Never invent information that is not in the source. Answer in plain prose,
at most two short paragraphs."""

    @property
    def output_type(self) -> type[str]:
        return str

    def _build_prompt(self, input_data: WebSummaryInput) -> str:
        content = input_data.content[: input_data.max_chars]
        return f"""Summarize the following content for research on "{input_data.subject}".

Title: {input_data.title or "No title"}
URL: {input_data.url}
Content: {content}

Focus on: {input_data.focus}"""
