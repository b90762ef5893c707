"""Base class for Pydantic AI agents."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, cast

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError

from brandscope.config import settings
from brandscope.core.concurrency import with_timeout

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for Pydantic AI agents.

    Each agent should:
    1. Define the system_prompt property
    2. Define the output_type property (a pydantic model, or ``str`` for free text)
    3. Implement _build_prompt to construct the user prompt
    """

    # Model tier for environment-aware resolution (reasoning / standard / fast)
    model_tier: str = "standard"
    # Explicit model override at the class level (bypasses tier resolution)
    model: str | None = None
    temperature: float = 0.3
    max_retries: int = settings.llm_max_retries

    def __init__(self, model_override: str | None = None) -> None:
        """Initialize the agent.

        Model resolution priority:
        1. model_override parameter (explicit runtime override)
        2. model class attribute (if set by subclass)
        3. settings.get_model(self.model_tier) (environment-aware tier fallback)
        """
        model_source = "tier_default"
        if model_override:
            self._model = model_override
            model_source = "runtime_override"
        elif self.model:
            self._model = self.model
            model_source = "class_override"
        else:
            self._model = settings.get_model(self.model_tier)
        self._agent: Agent[None, OutputT] | None = None

        logger.debug(
            "Agent initialized",
            extra={
                "agent": self.__class__.__name__,
                "model": self._model,
                "model_tier": self.model_tier,
                "model_source": model_source,
            },
        )

    @property
    def agent(self) -> Agent[None, OutputT]:
        """Lazily initialize and return the Pydantic AI agent."""
        if self._agent is None:
            self._agent = cast(
                Agent[None, OutputT],
                Agent(
                    model=self._model,
                    output_type=self.output_type,
                    system_prompt=self.system_prompt,
                    retries=self.max_retries,
                    model_settings={"temperature": self.temperature},
                ),
            )
        agent = self._agent
        assert agent is not None
        return agent

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """System prompt for the agent."""
        pass

    @property
    @abstractmethod
    def output_type(self) -> type[OutputT]:
        """Output type for structured output, or ``str`` for free text."""
        pass

    @abstractmethod
    def _build_prompt(self, input_data: InputT) -> str:
        """Build the user prompt from input data."""
        pass

    async def run(self, input_data: InputT) -> OutputT:
        """Run the agent with input data.

        Every call is bounded by the tier timeout. A 429 from the primary
        model is retried once with ``settings.llm_fallback_model``.

        Raises:
            ExternalCallTimeoutError: If the model does not answer in time.
            ModelHTTPError: For non-retryable provider errors.
        """
        agent_name = self.__class__.__name__
        prompt = self._build_prompt(input_data)
        logger.info(
            "Agent run started",
            extra={
                "agent": agent_name,
                "input_type": type(input_data).__name__,
                "prompt_length": len(prompt),
                "model": self._model,
            },
        )

        timeout = settings.get_llm_timeout(self.model_tier)
        t0 = time.perf_counter()
        try:
            result = await with_timeout(
                self.agent.run(prompt),
                timeout=timeout,
                api_name=f"LLM:{agent_name}",
            )
        except ModelHTTPError as exc:
            fallback_model = settings.llm_fallback_model
            if exc.status_code != 429 or not fallback_model or fallback_model == self._model:
                raise
            logger.warning(
                "Model rate limited, retrying with fallback model",
                extra={"agent": agent_name, "model": self._model, "fallback_model": fallback_model},
            )
            result = await with_timeout(
                self.agent.run(prompt, model=fallback_model),
                timeout=timeout,
                api_name=f"LLM:{agent_name}",
            )
        elapsed = time.perf_counter() - t0

        usage = result.usage()
        logger.info(
            "Agent run completed",
            extra={
                "agent": agent_name,
                "duration_s": round(elapsed, 2),
                "total_tokens": getattr(usage, "total_tokens", None),
                "output_type": type(result.output).__name__,
            },
        )

        return result.output

    @staticmethod
    def _format_context_lines(lines: list[str], heading: str) -> str:
        """Render optional context lines as a titled block, or nothing."""
        if not lines:
            return ""
        joined = "\n".join(lines)
        return f"\n\n{heading}:\n{joined}"
