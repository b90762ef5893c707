"""Shared schema base classes and value helpers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the frontend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        """Dump to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class AdditionalIdentifiers(CamelModel):
    """Optional hints used to disambiguate brands that share a name."""

    industry: str | None = None
    location: str | None = None
    products: list[str] = Field(default_factory=list)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``."""
    return max(lower, min(upper, value))


def clamp_confidence(value: object) -> int:
    """Coerce a model-asserted confidence into an int within [0, 100]."""
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return int(round(clamp(numeric, 0.0, 100.0)))
