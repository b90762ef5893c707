"""Summarize long page or thread text, falling back to truncation."""

import logging

from brandscope.agents.web_summarizer import WebSummarizationAgent, WebSummaryInput

logger = logging.getLogger(__name__)


def truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


async def summarize_or_truncate(
    *,
    subject: str,
    content: str,
    focus: str,
    title: str = "",
    url: str = "",
    fallback_chars: int = 500,
) -> str:
    """Summarize ``content`` with the summarization agent.

    Any agent failure returns the first ``fallback_chars`` characters
    followed by ``...`` instead of raising.
    """
    try:
        agent = WebSummarizationAgent()
        summary = await agent.run(
            WebSummaryInput(
                subject=subject,
                title=title,
                url=url,
                content=content,
                focus=focus,
            )
        )
    except Exception as e:
        logger.warning(
            "Summarization failed, truncating content",
            extra={"subject": subject, "url": url, "error": str(e)},
        )
        return truncate(content, fallback_chars)

    summary = (summary or "").strip()
    if not summary:
        return truncate(content, fallback_chars)
    return summary
