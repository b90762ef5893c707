"""Custom exception classes for the application."""

from typing import Any


class BrandscopeError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Pipeline Errors
class PipelineError(BrandscopeError):
    """Base class for pipeline errors."""

    pass


class InvalidScorecardTransitionError(PipelineError):
    """Scorecard status change that would leave a terminal state."""

    def __init__(self, scorecard_id: str, current: str, target: str) -> None:
        super().__init__(
            f"Scorecard {scorecard_id} cannot move from {current} to {target}",
            details={"current": current, "target": target},
        )


class ScorecardNotFoundError(PipelineError):
    """Scorecard not found in the store."""

    def __init__(self, scorecard_id: str) -> None:
        super().__init__(f"Scorecard not found: {scorecard_id}")


# Registry Errors
class ToolNotFoundError(BrandscopeError):
    """No tool registered under this id."""

    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Tool not found: {tool_id}")


class AgentNotFoundError(BrandscopeError):
    """No agent endpoint registered under this name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Agent not found: {name}")


# External API Errors
class ExternalAPIError(BrandscopeError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        self.api_name = api_name
        super().__init__(f"{api_name} API error: {message}")


class RateLimitExceededError(ExternalAPIError):
    """Rate limit exceeded for external API."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "Rate limit exceeded")


class APIKeyMissingError(ExternalAPIError):
    """API key not configured."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "API key not configured")


class ExternalCallTimeoutError(ExternalAPIError):
    """External call did not finish within its deadline."""

    def __init__(self, api_name: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(api_name, f"Timed out after {timeout_seconds:.0f}s")


class MalformedModelOutputError(BrandscopeError):
    """Model output could not be parsed into the expected shape."""

    pass
